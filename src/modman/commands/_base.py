"""Custom Click base classes and shared options.

ModmanCommand and ModmanGroup accept an ``examples`` parameter; passing
``--examples`` prints them and exits, which keeps ``--help`` short.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click


def _add_examples_option(cmd: click.Command, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class ModmanCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


class ModmanGroup(click.Group):
    """Click Group whose subcommands default to :class:`ModmanCommand`."""

    command_class = ModmanCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


def selection_options(verb: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Module selection flags shared by ``install`` and ``uninstall``."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        func = click.argument("modules", nargs=-1)(func)
        func = click.option(
            "--fail-fast",
            is_flag=True,
            help="Stop before the next module once one has failed.",
        )(func)
        func = click.option(
            "-e",
            "--exclude",
            multiple=True,
            metavar="MODULE",
            help="Module to leave out (with --all). Repeatable.",
        )(func)
        func = click.option(
            "-a", "--all", "all_modules", is_flag=True, help=f"{verb} all modules."
        )(func)
        return func

    return decorator


def check_selection(modules: tuple[str, ...], all_modules: bool, exclude: tuple[str, ...]) -> None:
    """Reject contradictory or empty module selections."""
    if exclude and not all_modules:
        raise click.UsageError("--exclude requires --all.")
    if all_modules and modules:
        raise click.UsageError("Give module names or --all, not both.")
    if not all_modules and not modules:
        raise click.UsageError("Missing module names (or use --all).")
