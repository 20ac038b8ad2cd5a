"""BaseService — shared plumbing for CLI-facing services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from modman.config.settings import ModmanSettings
    from modman.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service classes.

    Holds the resolved settings and an optional plugin manager used to
    announce lifecycle events.
    """

    def __init__(self, settings: ModmanSettings, plugins: PluginManager | None = None) -> None:
        self._settings = settings
        self._plugins = plugins

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call plugin hook *hook_name*. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self._plugins is None:
            return
        try:
            getattr(self._plugins.hook, hook_name)(**payload)
        except Exception:
            logger.debug("Plugin hook %s failed", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
