"""Config file discovery.

Lookup order: ``MODMAN_CONFIG`` env var, then a walk-up from the current
directory (like git finds .git/), then the XDG config directory.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "modman.toml"
CONFIG_ENV_VAR = "MODMAN_CONFIG"


def user_config_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/modman/modman.toml`` (``~/.config`` fallback)."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "modman" / CONFIG_FILENAME


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for modman.toml.

    Returns the path to the config file, or None if not found.
    Checks MODMAN_CONFIG env var first and the user config last.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    fallback = user_config_path()
    if fallback.is_file():
        return fallback
    return None

