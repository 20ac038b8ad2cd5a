"""Extension layer — lifecycle hooks via pluggy.

Discovery: ``modman.plugins`` entry points plus single-file plugins from a
local directory.
INVARIANT: Plugin failures are warnings, never errors.
"""

from modman.plugins.manager import PluginManager

__all__ = ["PluginManager"]
