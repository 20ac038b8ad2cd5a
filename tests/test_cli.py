"""Tests for the root CLI group and global flags."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from modman import __version__
from modman.cli import cli


class TestRootGroup:
    def test_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("list", "install", "uninstall"):
            assert command in result.output

    def test_no_command_prints_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--examples"])
        assert result.exit_code == 0
        assert "modman list --verify" in result.output


class TestGlobalFlags:
    def test_invalid_config_file(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "modman.toml").write_text("[modules\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        result = cli_runner.invoke(cli, ["list"])
        assert result.exit_code == 1
        assert "Invalid TOML" in result.output

    def test_explicit_config(
        self,
        cli_runner: CliRunner,
        tmp_path: Path,
        dotfiles: Path,
        home: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        (dotfiles / "git").mkdir()
        (dotfiles / "git" / "config.toml").write_text("", encoding="utf-8")
        cfg = tmp_path / "elsewhere.toml"
        cfg.write_text(f'[modules]\ndir = "{dotfiles}"\n[plugins]\nenabled = false\n')
        monkeypatch.chdir(home)
        result = cli_runner.invoke(cli, ["-q", "-c", str(cfg), "list"])
        assert result.exit_code == 0
        assert result.output.strip() == "git"

    @pytest.mark.usefixtures("workspace")
    def test_verbose_shows_telemetry(self, cli_runner: CliRunner, dotfiles: Path) -> None:
        (dotfiles / "git").mkdir()
        (dotfiles / "git" / "config.toml").write_text("", encoding="utf-8")
        result = cli_runner.invoke(cli, ["-v", "list"])
        assert result.exit_code == 0
        assert "ModuleService.list_modules" in result.output

    @pytest.mark.usefixtures("workspace")
    def test_env_modules_dir(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        other = tmp_path / "env-dots"
        (other / "tmux").mkdir(parents=True)
        (other / "tmux" / "config.toml").write_text("", encoding="utf-8")
        monkeypatch.setenv("MODMAN_MODULES_DIR", str(other))
        result = cli_runner.invoke(cli, ["-q", "list"])
        assert result.output.strip() == "tmux"
