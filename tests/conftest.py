"""Shared pytest fixtures for modman tests."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from modman.domain.module import FileMapping, Module
from modman.services.telemetry import disable_telemetry

ModuleFactory = Callable[..., Module]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None]:
    """Keep the developer's own config and env vars out of every test."""
    for key in list(os.environ):
        if key.startswith("MODMAN_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    app_level = logging.getLogger("modman").level
    yield
    disable_telemetry()
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("modman").setLevel(app_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Stand-in for the user's home directory (the target root)."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def dotfiles(tmp_path: Path) -> Path:
    """Empty modules directory."""
    path = tmp_path / "dotfiles"
    path.mkdir()
    return path


def write_script(path: Path, body: str) -> Path:
    """Write an executable shell script."""
    path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IRUSR)
    return path


def write_module_dir(
    dotfiles: Path,
    name: str,
    resources: dict[str, str],
    *,
    description: str | None = None,
    init: str | None = None,
    cleanup: str | None = None,
) -> Path:
    """Create a module directory with a config.toml and its resource files.

    *resources* maps source (created with placeholder content) to target.
    *init* / *cleanup* are shell script bodies.
    """
    module_dir = dotfiles / name
    module_dir.mkdir()
    lines: list[str] = []
    if description:
        lines.append(f'description = "{description}"')
    lines.append(f"init = {'true' if init is not None else 'false'}")
    lines.append(f"cleanup = {'true' if cleanup is not None else 'false'}")
    lines.append("[resources]")
    for source, target in resources.items():
        lines.append(f'"{source}" = "{target}"')
        src = module_dir / source
        src.parent.mkdir(parents=True, exist_ok=True)
        src.write_text(f"# {name}:{source}\n", encoding="utf-8")
    (module_dir / "config.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")
    if init is not None:
        write_script(module_dir / "init.sh", init)
    if cleanup is not None:
        write_script(module_dir / "cleanup.sh", cleanup)
    return module_dir


@pytest.fixture
def make_module(dotfiles: Path, home: Path) -> ModuleFactory:
    """Build an in-memory Module whose sources exist on disk.

    ``make_module("vim", {"vimrc": ".vimrc"})`` creates
    ``dotfiles/vim/vimrc`` and maps it to ``home/.vimrc``.
    """

    def factory(
        name: str,
        resources: dict[str, str],
        *,
        init: str | None = None,
        cleanup: str | None = None,
    ) -> Module:
        module_dir = dotfiles / name
        module_dir.mkdir(exist_ok=True)
        mappings = []
        for source, target in resources.items():
            src = module_dir / source
            src.parent.mkdir(parents=True, exist_ok=True)
            src.write_text(f"# {name}:{source}\n", encoding="utf-8")
            mappings.append(FileMapping(source=src, target=home / target))
        return Module(
            name=name,
            directory=module_dir,
            mappings=tuple(mappings),
            init_script=write_script(module_dir / "init.sh", init) if init is not None else None,
            cleanup_script=(
                write_script(module_dir / "cleanup.sh", cleanup) if cleanup is not None else None
            ),
        )

    return factory


@pytest.fixture
def workspace(tmp_path: Path, dotfiles: Path, home: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """CWD with a modman.toml pointing at the temp modules dir and home.

    Use via ``@pytest.mark.usefixtures("workspace")`` on CLI test classes.
    """
    (tmp_path / "modman.toml").write_text(
        f'[modules]\ndir = "{dotfiles}"\n[install]\ntarget_root = "{home}"\n'
        "[plugins]\nenabled = false\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_module(dotfiles: Path) -> Callable[..., Path]:
    """Create module directories on disk; see :func:`write_module_dir`."""

    def factory(name: str, resources: dict[str, str], **kwargs: str | None) -> Path:
        return write_module_dir(dotfiles, name, resources, **kwargs)

    return factory
