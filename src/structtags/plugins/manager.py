"""Plugin discovery and resolver collection.

Discovery: setuptools entry points in the ``structtags.plugins`` group, plus
plugins registered directly. Every plugin's ``register_tag_resolvers`` result
is merged into one :class:`ResolverRegistry`.

INVARIANT: Plugin failures are warnings, never errors.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from structtags.domain.resolvers import ResolverRegistry
from structtags.plugins.hookspecs import PROJECT_NAME, StructTagsHookSpec

ENTRY_POINT_GROUP = "structtags.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and resolver registration."""

    def __init__(self, registry: ResolverRegistry | None = None) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(StructTagsHookSpec)
        self._registry = registry if registry is not None else ResolverRegistry()
        self._loaded: bool = False
        self._collected: set[str] = set()

    @property
    def registry(self) -> ResolverRegistry:
        """Registry holding every plugin-contributed resolve hook."""
        return self._registry

    @property
    def is_loaded(self) -> bool:
        """Whether discover_and_load() has been called."""
        return self._loaded

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins and collect their resolvers.

        Returns a list of loaded plugin names.
        """
        try:
            self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        except Exception:
            logger.warning("Failed to load %s entry points", ENTRY_POINT_GROUP, exc_info=True)
        self._normalize_plugin_instances()
        for plugin in self._pm.get_plugins():
            self._collect_resolvers(plugin, self._pm.get_name(plugin) or repr(plugin))
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly and collect its resolvers."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        self._collect_resolvers(plugin, resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _normalize_plugin_instances(self) -> None:
        """Replace entry-point plugin classes with instances so hooks bind ``self``."""
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Failed to instantiate plugin %s", plugin_name, exc_info=True)
                continue
            self._pm.register(instance, name=plugin_name)

    def _collect_resolvers(self, plugin: object, name: str) -> None:
        hook = getattr(plugin, "register_tag_resolvers", None)
        if hook is None or name in self._collected:
            return
        self._collected.add(name)
        try:
            contributed = hook() or {}
        except Exception:
            logger.warning("Plugin %s failed to register tag resolvers", name, exc_info=True)
            return

        for tp, resolve in contributed.items():
            if tp in self._registry:
                logger.warning(
                    "Plugin %s: resolver for %r conflicts with an existing one; skipped",
                    name,
                    tp,
                )
                continue
            self._registry.register(tp, resolve)
            logger.debug("Plugin %s registered tag resolver for %r", name, tp)
