"""Command: list installable modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from modman.commands._base import ModmanCommand

if TYPE_CHECKING:
    from modman.commands._context import AppContext


@click.command(
    "list",
    cls=ModmanCommand,
    examples="""\
  modman list
  modman list --verify
  modman -m ~/src/dotfiles list
  modman --json list --verify""",
)
@click.option("--verify", is_flag=True, help="Dry-run validation and show each module's status.")
@click.pass_obj
def list_cmd(app: AppContext, verify: bool) -> None:
    """List modules in the modules directory."""
    app.emit(app.service.list_modules(verify=verify))
