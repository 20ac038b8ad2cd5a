"""Tests for the install command."""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner

from modman.cli import cli


@pytest.mark.usefixtures("workspace")
class TestInstallCommand:
    def test_install_module(
        self, cli_runner: CliRunner, write_module: Callable[..., Path], home: Path
    ) -> None:
        write_module("vim", {"vimrc": ".vimrc"})
        result = cli_runner.invoke(cli, ["install", "vim"])
        assert result.exit_code == 0, result.output
        assert "vim" in result.output
        assert "created" in result.output
        assert (home / ".vimrc").is_symlink()

    def test_json_output(
        self, cli_runner: CliRunner, write_module: Callable[..., Path], dotfiles: Path
    ) -> None:
        write_module("vim", {"vimrc": ".vimrc"})
        result = cli_runner.invoke(cli, ["--json", "install", "vim"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["op"] == "install"
        outcome = data["data"]["modules"][0]["outcomes"][0]
        assert outcome["kind"] == "created"
        assert outcome["source"] == str(dotfiles / "vim" / "vimrc")

    def test_quiet_output(self, cli_runner: CliRunner, write_module: Callable[..., Path]) -> None:
        write_module("vim", {"vimrc": ".vimrc"})
        result = cli_runner.invoke(cli, ["-q", "install", "vim"])
        assert result.exit_code == 0
        assert result.output.strip() == "vim success"

    def test_conflict_exits_1_and_keeps_file(
        self, cli_runner: CliRunner, write_module: Callable[..., Path], home: Path
    ) -> None:
        write_module("vim", {"vimrc": ".vimrc"})
        (home / ".vimrc").write_text("mine")
        result = cli_runner.invoke(cli, ["install", "vim"])
        assert result.exit_code == 1
        assert "target_conflict" in result.output
        assert (home / ".vimrc").read_text() == "mine"

    def test_unknown_module(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["install", "nope"])
        assert result.exit_code == 1
        assert "no module named 'nope'" in result.output

    def test_all_with_exclude(
        self, cli_runner: CliRunner, write_module: Callable[..., Path], home: Path
    ) -> None:
        write_module("vim", {"vimrc": ".vimrc"})
        write_module("zsh", {"zshrc": ".zshrc"})
        result = cli_runner.invoke(cli, ["install", "--all", "-e", "zsh"])
        assert result.exit_code == 0
        assert (home / ".vimrc").is_symlink()
        assert not os.path.lexists(home / ".zshrc")

    def test_fail_fast(
        self, cli_runner: CliRunner, write_module: Callable[..., Path], home: Path
    ) -> None:
        write_module("a", {"a": ".a"})
        write_module("b", {"b": ".b"})
        (home / ".a").write_text("mine")
        result = cli_runner.invoke(cli, ["install", "--all", "--fail-fast"])
        assert result.exit_code == 1
        assert "not processed" in result.output
        assert not os.path.lexists(home / ".b")

    def test_init_script_failure(
        self, cli_runner: CliRunner, write_module: Callable[..., Path], home: Path
    ) -> None:
        write_module("vim", {"vimrc": ".vimrc"}, init="exit 7")
        result = cli_runner.invoke(cli, ["install", "vim"])
        assert result.exit_code == 1
        assert "exited with status 7" in result.output
        assert (home / ".vimrc").is_symlink()


@pytest.mark.usefixtures("workspace")
class TestSelectionErrors:
    @pytest.mark.parametrize(
        ("args", "message"),
        [
            (["install"], "Missing module names"),
            (["install", "--all", "vim"], "not both"),
            (["install", "-e", "vim", "zsh"], "--exclude requires --all"),
        ],
    )
    def test_usage_errors(self, cli_runner: CliRunner, args: list[str], message: str) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 2
        assert message in result.output

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["install", "--examples"])
        assert result.exit_code == 0
        assert "modman install --all" in result.output
