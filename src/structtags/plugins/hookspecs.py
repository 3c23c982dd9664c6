"""Pluggy hook specifications for structtags.

One setup-time hook lets plugins contribute resolve hooks for types they
cannot (or do not want to) give a ``resolve_tag_option`` method.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from structtags.domain.resolvers import ResolveHook

PROJECT_NAME = "structtags"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class StructTagsHookSpec:
    """Hook specifications for the structtags plugin system."""

    @hookspec
    def register_tag_resolvers(self) -> dict[Any, ResolveHook] | None:
        """Return type -> resolve hook mappings to extend the ResolverRegistry.

        Each hook is called as ``hook(field, value)`` and returns the typed
        value or raises.
        """
