"""Manifest loading and module discovery.

A module is a directory holding a ``config.toml`` manifest::

    description = "Vim configuration"
    init = true          # run init.sh after install
    cleanup = false      # run cleanup.sh after uninstall

    [resources]
    "vimrc" = ".vimrc"   # source (inside the module) = target

Relative targets are placed under the configured target root (the home
directory by default); ``~`` is expanded; absolute targets are kept.
Resource order in the file is mapping order.

The loader checks structure only.  Whether sources exist is decided by
the validator at install time, so a module with a missing source still
loads and is reported by ``modman list --verify``.
"""

from __future__ import annotations

import os
import stat
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from modman.domain.errors import InvalidModule, InvalidReason, IoError, ModmanError
from modman.domain.module import FileMapping, Module

MANIFEST_FILENAME = "config.toml"
INIT_SCRIPT = "init.sh"
CLEANUP_SCRIPT = "cleanup.sh"

# Owner permission bits required on lifecycle scripts
_OWNER_RX = stat.S_IRUSR | stat.S_IXUSR


class ModuleManifest(BaseModel):
    """Schema of a module's ``config.toml``."""

    model_config = {"frozen": True}

    description: str | None = None
    init: bool = False
    cleanup: bool = False
    resources: dict[str, str] = Field(default_factory=dict)


def _has_owner_rx(path: Path) -> bool:
    try:
        mode = path.stat().st_mode
    except OSError:
        return False
    return stat.S_ISREG(mode) and (mode & _OWNER_RX) == _OWNER_RX


class ManifestLoader:
    """Builds :class:`Module` values from module directories.

    Args:
        target_root: Base for relative targets.
        manifest: Manifest filename inside each module directory.
        init_script: Init script filename.
        cleanup_script: Cleanup script filename.
    """

    def __init__(
        self,
        target_root: Path,
        *,
        manifest: str = MANIFEST_FILENAME,
        init_script: str = INIT_SCRIPT,
        cleanup_script: str = CLEANUP_SCRIPT,
    ) -> None:
        self._target_root = target_root.expanduser()
        self._manifest = manifest
        self._init_script = init_script
        self._cleanup_script = cleanup_script

    def load(self, module_dir: Path) -> Module:
        """Parse and structurally check one module directory.

        Raises:
            InvalidModule: Unreadable/invalid manifest, or a flagged
                script that is missing or not executable.
        """
        module_dir = Path(os.path.abspath(module_dir))
        name = module_dir.name
        manifest_path = module_dir / self._manifest

        try:
            raw = manifest_path.read_bytes()
        except OSError as exc:
            msg = f"cannot read {self._manifest}: {exc.strerror or exc}"
            raise InvalidModule(msg, reason=InvalidReason.MANIFEST, module=name) from exc

        try:
            manifest = ModuleManifest.model_validate(tomllib.loads(raw.decode("utf-8")))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError, ValidationError) as exc:
            msg = f"invalid {self._manifest}: {exc}"
            raise InvalidModule(msg, reason=InvalidReason.MANIFEST, module=name) from exc

        init = self._script(module_dir, self._init_script, "init") if manifest.init else None
        cleanup = (
            self._script(module_dir, self._cleanup_script, "cleanup") if manifest.cleanup else None
        )

        mappings = tuple(
            FileMapping(source=module_dir / source, target=self._target_path(target))
            for source, target in manifest.resources.items()
        )

        try:
            return Module(
                name=name,
                directory=module_dir,
                mappings=mappings,
                init_script=init,
                cleanup_script=cleanup,
                description=manifest.description,
            )
        except ValidationError as exc:
            msg = f"invalid module definition: {exc.errors()[0]['msg']}"
            raise InvalidModule(msg, reason=InvalidReason.DUPLICATE_TARGET, module=name) from exc

    def discover(self, modules_dir: Path) -> list[Module | ModmanError]:
        """Load every module directory under *modules_dir*, sorted by name.

        Per-module problems are returned in place of the module; only an
        unreadable *modules_dir* raises.
        """
        modules_dir = modules_dir.expanduser()
        try:
            entries = sorted(p for p in modules_dir.iterdir() if p.is_dir())
        except OSError as exc:
            msg = f"module directory {modules_dir} not found or not readable"
            raise IoError(msg, target=modules_dir) from exc

        results: list[Module | ModmanError] = []
        for path in entries:
            if path.name.startswith("."):
                continue
            try:
                results.append(self.load(path))
            except ModmanError as exc:
                results.append(exc)
        return results

    def select(self, modules_dir: Path, names: list[str]) -> list[Module]:
        """Load the named modules in the given order; first failure raises."""
        modules_dir = modules_dir.expanduser()
        modules: list[Module] = []
        for name in names:
            path = modules_dir / name
            if name in ("", ".", "..") or "/" in name or not path.is_dir():
                msg = f"no module named {name!r} in {modules_dir}"
                raise InvalidModule(msg, reason=InvalidReason.MANIFEST, module=name)
            modules.append(self.load(path))
        return modules

    def _script(self, module_dir: Path, filename: str, kind: str) -> Path:
        path = module_dir / filename
        if not _has_owner_rx(path):
            msg = f"{kind} script {filename} not found or has incorrect permissions"
            raise InvalidModule(
                msg, reason=InvalidReason.SCRIPT, module=module_dir.name, target=path
            )
        return path

    def _target_path(self, target: str) -> Path:
        path = Path(target).expanduser()
        if not path.is_absolute():
            path = self._target_root / path
        return Path(os.path.normpath(path))
