"""Command: uninstall modules (remove owned symlinks, then run cleanup scripts)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from modman.commands._base import ModmanCommand, check_selection, selection_options

if TYPE_CHECKING:
    from modman.commands._context import AppContext


@click.command(
    cls=ModmanCommand,
    examples="""\
  modman uninstall vim
  modman uninstall --all -e zsh
  modman --json uninstall git""",
)
@selection_options("Uninstall")
@click.pass_obj
def uninstall(
    app: AppContext,
    modules: tuple[str, ...],
    all_modules: bool,
    exclude: tuple[str, ...],
    fail_fast: bool,
) -> None:
    """Uninstall MODULES, removing only symlinks that point into them."""
    check_selection(modules, all_modules, exclude)
    app.emit(
        app.service.uninstall(
            modules, all_modules=all_modules, exclude=exclude, fail_fast=fail_fast
        )
    )
