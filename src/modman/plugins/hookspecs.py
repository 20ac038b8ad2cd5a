"""Pluggy hook specifications for modman lifecycle events.

Hooks are called synchronously after each module reaches a terminal
state, whether it succeeded or not.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("modman")
hookimpl = pluggy.HookimplMarker("modman")


class ModmanHookSpec:
    """Hook specifications for the modman plugin system."""

    @hookspec
    def post_install(self, module_name: str, status: str, targets: list[str]) -> None:
        """Called after a module install call finishes.

        *status* is ``success``, ``partial_failure`` or ``aborted``;
        *targets* lists the module's target paths in mapping order
        (empty when validation aborted the call).
        """

    @hookspec
    def post_uninstall(self, module_name: str, status: str, targets: list[str]) -> None:
        """Called after a module uninstall call finishes."""
