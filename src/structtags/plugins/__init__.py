"""Extension layer — custom resolver plugins via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints.
INVARIANT: Plugin failures are warnings, never errors.
"""

from structtags.plugins.manager import PluginManager

__all__ = ["PluginManager"]
