"""Module and FileMapping — the in-memory description handed to the engine.

A Module is built by the manifest loader (or directly by a caller) before
each install/uninstall call and discarded afterwards.  It is frozen: the
engine never mutates it.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator

from modman.domain.types import Operation


class FileMapping(BaseModel):
    """One (source, target) pair: a symlink at *target* whose value is *source*."""

    model_config = {"frozen": True}

    source: Path
    target: Path

    def __str__(self) -> str:
        return f"{self.source} -> {self.target}"


class Module(BaseModel):
    """A named bundle of file mappings plus optional lifecycle scripts.

    Attributes:
        name: Unique, non-empty module name.
        directory: The module's own directory. Sources must live inside
            it, and lifecycle scripts run with it as working directory.
        mappings: Ordered mappings; this order is the order of every
            link, unlink and rollback step.
        init_script: Run after a successful install.
        cleanup_script: Run after a successful uninstall.
    """

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    directory: Path
    mappings: tuple[FileMapping, ...] = ()
    init_script: Path | None = None
    cleanup_script: Path | None = None
    description: str | None = None

    @model_validator(mode="after")
    def _unique_targets(self) -> Module:
        seen: set[Path] = set()
        for mapping in self.mappings:
            if mapping.target in seen:
                msg = f"duplicate target {mapping.target} in module {self.name!r}"
                raise ValueError(msg)
            seen.add(mapping.target)
        return self

    def script_for(self, operation: Operation) -> Path | None:
        """The lifecycle script that follows *operation*, if configured."""
        if operation is Operation.INSTALL:
            return self.init_script
        return self.cleanup_script

    def __str__(self) -> str:
        if self.description:
            return f"{self.name} - {self.description}"
        return self.name
