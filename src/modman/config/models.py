"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, modman.toml only contains overrides.
Most users need at most a ``[modules] dir`` entry.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class ModulesConfig(BaseModel):
    """[modules] section."""

    model_config = {"frozen": True}

    dir: Path = Field(default_factory=lambda: Path.home() / ".dotfiles")
    manifest: str = "config.toml"
    init_script: str = "init.sh"
    cleanup_script: str = "cleanup.sh"


class InstallConfig(BaseModel):
    """[install] section."""

    model_config = {"frozen": True}

    # Relative manifest targets are placed under this directory.
    target_root: Path = Field(default_factory=Path.home)
    create_parents: bool = False


class ScriptsConfig(BaseModel):
    """[scripts] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    timeout: float | None = None
    capture_output: bool = False


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    local_dir: Path | None = None

