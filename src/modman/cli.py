"""Root CLI group for modman with global flags and command registration."""

from __future__ import annotations

import click

from modman import __version__
from modman.commands import register_commands
from modman.commands._base import ModmanGroup
from modman.commands._context import AppContext
from modman.config.settings import ModmanSettings


@click.group(
    cls=ModmanGroup,
    invoke_without_command=True,
    examples="""\
  modman list --verify
  modman install vim
  modman -v uninstall --all""",
)
@click.version_option(version=__version__, prog_name="modman")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-m",
    "--modules-dir",
    type=click.Path(file_okay=False, path_type=str),
    default=None,
    help="Module directory (default: ~/.dotfiles).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    modules_dir: str | None,
) -> None:
    """modman — dotfiles module manager."""
    settings = ModmanSettings.from_cli(
        config_path=config_path,
        modules_dir=modules_dir,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
