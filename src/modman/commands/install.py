"""Command: install modules (create symlinks, then run init scripts)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from modman.commands._base import ModmanCommand, check_selection, selection_options

if TYPE_CHECKING:
    from modman.commands._context import AppContext


@click.command(
    cls=ModmanCommand,
    examples="""\
  modman install vim zsh
  modman install --all
  modman install --all -e i3 -e polybar
  modman install --all --fail-fast
  modman --json install git""",
)
@selection_options("Install")
@click.pass_obj
def install(
    app: AppContext,
    modules: tuple[str, ...],
    all_modules: bool,
    exclude: tuple[str, ...],
    fail_fast: bool,
) -> None:
    """Install MODULES, never overwriting files modman does not own."""
    check_selection(modules, all_modules, exclude)
    app.emit(
        app.service.install(
            modules, all_modules=all_modules, exclude=exclude, fail_fast=fail_fast
        )
    )
