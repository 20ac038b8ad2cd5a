"""Tests for Module and FileMapping."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from modman.domain.module import FileMapping, Module
from modman.domain.types import Operation


class TestModule:
    def test_defaults(self, tmp_path: Path) -> None:
        module = Module(name="vim", directory=tmp_path)
        assert module.mappings == ()
        assert module.init_script is None
        assert module.cleanup_script is None

    def test_empty_name_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            Module(name="", directory=tmp_path)

    def test_duplicate_targets_rejected(self, tmp_path: Path) -> None:
        target = tmp_path / ".vimrc"
        with pytest.raises(ValidationError, match="duplicate target"):
            Module(
                name="vim",
                directory=tmp_path,
                mappings=(
                    FileMapping(source=tmp_path / "a", target=target),
                    FileMapping(source=tmp_path / "b", target=target),
                ),
            )

    def test_frozen(self, tmp_path: Path) -> None:
        module = Module(name="vim", directory=tmp_path)
        with pytest.raises(ValidationError):
            module.name = "zsh"  # type: ignore[misc]

    def test_mapping_order_preserved(self, tmp_path: Path) -> None:
        names = ["c", "a", "b"]
        module = Module(
            name="m",
            directory=tmp_path,
            mappings=tuple(
                FileMapping(source=tmp_path / n, target=tmp_path / f".{n}") for n in names
            ),
        )
        assert [m.source.name for m in module.mappings] == names

    def test_script_for(self, tmp_path: Path) -> None:
        module = Module(
            name="vim",
            directory=tmp_path,
            init_script=tmp_path / "init.sh",
            cleanup_script=tmp_path / "cleanup.sh",
        )
        assert module.script_for(Operation.INSTALL) == tmp_path / "init.sh"
        assert module.script_for(Operation.UNINSTALL) == tmp_path / "cleanup.sh"

    def test_str_with_description(self, tmp_path: Path) -> None:
        assert str(Module(name="vim", directory=tmp_path, description="Editor")) == "vim - Editor"
        assert str(Module(name="vim", directory=tmp_path)) == "vim"
