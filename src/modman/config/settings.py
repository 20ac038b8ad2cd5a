"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``MODMAN_*`` prefix
  3. TOML file    — ``modman.toml`` discovered via :func:`find_config`
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the discovery logic from :mod:`modman.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from modman.config.discovery import find_config
from modman.config.models import InstallConfig, ModulesConfig, PluginsConfig, ScriptsConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a discovered ``modman.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class ModmanSettings(BaseSettings):
    """Unified settings for the modman CLI.

    Stored on the :class:`~modman.commands._context.AppContext` created by
    the root CLI group.

    Attributes:
        config_path: The TOML file that was loaded, or None.
        modules_dir: ``--modules-dir`` override; wins over ``[modules] dir``.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "MODMAN_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None
    modules_dir: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    modules: ModulesConfig = Field(default_factory=ModulesConfig)
    install: InstallConfig = Field(default_factory=InstallConfig)
    scripts: ScriptsConfig = Field(default_factory=ScriptsConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @property
    def module_root(self) -> Path:
        """Directory holding one subdirectory per module."""
        return (self.modules_dir or self.modules.dir).expanduser()

    @property
    def target_root(self) -> Path:
        """Base directory for relative manifest targets."""
        return self.install.target_root.expanduser()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> ModmanSettings:
        """Construct settings from CLI invocation.

        Uses the explicit *config_path* when given, otherwise discovers
        ``modman.toml`` starting from *start* (default: cwd).  ``None``
        flag values are dropped so lower-priority sources still apply.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(start)

        flags = {k: v for k, v in cli_flags.items() if v is not None}

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **flags)
        finally:
            _tls.toml_path = None
