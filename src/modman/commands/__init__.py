"""Subcommand modules for modman.

register_commands() imports commands lazily so ``modman --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from modman.commands.install import install
    from modman.commands.list_cmd import list_cmd
    from modman.commands.uninstall import uninstall

    cli.add_command(list_cmd)
    cli.add_command(install)
    cli.add_command(uninstall)
