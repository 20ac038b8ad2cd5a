"""Tests for plugin discovery and hook dispatch."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from modman.plugins.hookspecs import hookimpl
from modman.plugins.manager import PluginManager


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    @hookimpl
    def post_uninstall(self, module_name: str, status: str, targets: list[str]) -> None:
        self.calls.append({"module": module_name, "status": status, "targets": targets})


LOCAL_PLUGIN = '''
from modman.plugins.hookspecs import hookimpl

SEEN = []


class Notifier:
    @hookimpl
    def post_install(self, module_name, status, targets):
        SEEN.append(module_name)


class NotAPlugin:
    def post_install(self, module_name, status, targets):
        raise AssertionError("should not be registered")
'''


class TestPluginManager:
    def test_register_and_dispatch(self) -> None:
        manager = PluginManager()
        recorder = _Recorder()
        manager.register_plugin(recorder)

        manager.hook.post_uninstall(module_name="vim", status="success", targets=["/h/.vimrc"])

        assert recorder.calls == [
            {"module": "vim", "status": "success", "targets": ["/h/.vimrc"]}
        ]
        assert "_Recorder" in manager.list_plugin_names()

    def test_unregister(self) -> None:
        manager = PluginManager()
        recorder = _Recorder()
        manager.register_plugin(recorder, name="rec")
        manager.unregister(recorder)
        manager.hook.post_uninstall(module_name="vim", status="success", targets=[])
        assert recorder.calls == []

    def test_discover_local_dir(self, tmp_path: Path) -> None:
        (tmp_path / "notify.py").write_text(LOCAL_PLUGIN, encoding="utf-8")
        (tmp_path / "_private.py").write_text("raise SystemExit('never imported')\n")
        manager = PluginManager()

        names = manager.discover_and_load(local_dir=tmp_path)

        assert names == ["modman_local_plugin_notify.Notifier"]
        manager.hook.post_install(module_name="zsh", status="success", targets=[])
        assert sys.modules["modman_local_plugin_notify"].SEEN == ["zsh"]

    def test_broken_local_plugin_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "broken.py").write_text("import does_not_exist_anywhere\n")
        manager = PluginManager()
        assert manager.discover_and_load(local_dir=tmp_path) == []

    def test_missing_local_dir(self, tmp_path: Path) -> None:
        assert PluginManager().discover_and_load(local_dir=tmp_path / "nope") == []

    def test_has_hook_impls(self) -> None:
        class Plain:
            def post_install(self) -> None: ...

        assert PluginManager._has_hook_impls(_Recorder)
        assert not PluginManager._has_hook_impls(Plain)
