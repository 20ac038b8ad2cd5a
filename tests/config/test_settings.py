"""Tests for ModmanSettings source priority and derived paths."""

from __future__ import annotations

from pathlib import Path

import click
import pytest

from modman.config.settings import ModmanSettings


class TestDefaults:
    def test_code_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        settings = ModmanSettings.from_cli(start=tmp_path)
        assert settings.config_path is None
        assert settings.module_root == tmp_path / ".dotfiles"
        assert settings.target_root == tmp_path
        assert settings.modules.manifest == "config.toml"
        assert settings.install.create_parents is False
        assert settings.scripts.enabled is True
        assert settings.plugins.enabled is True


class TestToml:
    def test_sections_loaded(self, tmp_path: Path) -> None:
        (tmp_path / "modman.toml").write_text(
            '[modules]\ndir = "/srv/dotfiles"\n'
            "[install]\ncreate_parents = true\n"
            "[scripts]\ntimeout = 30\ncapture_output = true\n",
            encoding="utf-8",
        )
        settings = ModmanSettings.from_cli(start=tmp_path)
        assert settings.config_path == tmp_path / "modman.toml"
        assert settings.module_root == Path("/srv/dotfiles")
        assert settings.install.create_parents is True
        assert settings.scripts.timeout == 30
        assert settings.scripts.capture_output is True

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text("[plugins]\nenabled = false\n", encoding="utf-8")
        settings = ModmanSettings.from_cli(config_path=str(cfg), start=tmp_path / "x")
        assert settings.plugins.enabled is False

    def test_invalid_toml_is_click_error(self, tmp_path: Path) -> None:
        (tmp_path / "modman.toml").write_text("[modules\n", encoding="utf-8")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            ModmanSettings.from_cli(start=tmp_path)


class TestPriority:
    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "modman.toml").write_text(
            "[scripts]\nenabled = true\n", encoding="utf-8"
        )
        monkeypatch.setenv("MODMAN_SCRIPTS__ENABLED", "false")
        settings = ModmanSettings.from_cli(start=tmp_path)
        assert settings.scripts.enabled is False

    def test_cli_modules_dir_beats_toml(self, tmp_path: Path) -> None:
        (tmp_path / "modman.toml").write_text(
            '[modules]\ndir = "/from/toml"\n', encoding="utf-8"
        )
        settings = ModmanSettings.from_cli(start=tmp_path, modules_dir="/from/cli")
        assert settings.module_root == Path("/from/cli")

    def test_none_flags_dropped(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MODMAN_MODULES_DIR", str(tmp_path / "env"))
        settings = ModmanSettings.from_cli(start=tmp_path, modules_dir=None)
        assert settings.module_root == tmp_path / "env"

    def test_tilde_expanded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        settings = ModmanSettings.from_cli(start=tmp_path, modules_dir="~/dots")
        assert settings.module_root == tmp_path / "dots"
