"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``.  Builds the ModuleService lazily and centralises
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from modman.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from modman.config.settings import ModmanSettings
    from modman.plugins.manager import PluginManager
    from modman.services.modules import ModuleService
    from modman.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Plugins and services are created on first use so ``--help`` and
    ``--version`` stay cheap.
    """

    def __init__(self, settings: ModmanSettings) -> None:
        self.settings = settings
        self._service: ModuleService | None = None

        from modman.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose, quiet=settings.quiet, log_json=settings.log_json
        )

        if settings.verbose:
            from modman.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def service(self) -> ModuleService:
        """The module service (created lazily on first access)."""
        if self._service is None:
            from modman.services.modules import ModuleService

            self._service = ModuleService(self.settings, self._load_plugins())
        return self._service

    def _load_plugins(self) -> PluginManager | None:
        if not self.settings.plugins.enabled:
            return None
        from modman.plugins.manager import PluginManager

        manager = PluginManager()
        manager.discover_and_load(local_dir=self.settings.plugins.local_dir)
        return manager

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr so they don't
          pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
