"""Thread-safe cache of decoded field tags, keyed by subject shape.

Designed for encoders that look up the same type's tags on every call.

INVARIANT: An entry is either absent or fully populated.
INVARIANT: At most one decode runs per subject shape at a time; concurrent
misses wait on the in-flight Future and share its result or exception.
Failed decodes are never stored.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from structtags.domain.compiler import compile_plan
from structtags.domain.decoder import FieldTag, decode

if TYPE_CHECKING:
    from structtags.domain.compiler import DecodingPlan
    from structtags.domain.resolvers import ResolverRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")

Tags = tuple[FieldTag[Any], ...]


class TagCache(Generic[T]):
    """Decoded-record cache bound to one plan and one tag name.

    Parameters:
        plan: Compiled plan of the option shape.
        tag_name: Annotation name read from subject fields (e.g. ``"json"``).
    """

    def __init__(self, plan: DecodingPlan, tag_name: str) -> None:
        self._plan = plan
        self._tag_name = tag_name
        self._entries: dict[Any, Tags] = {}
        self._inflight: dict[Any, Future[Tags]] = {}
        self._lock = threading.Lock()

    @classmethod
    def for_shape(
        cls,
        option_shape: Any,
        tag_name: str,
        *,
        registry: ResolverRegistry | None = None,
    ) -> TagCache[Any]:
        """Compile *option_shape* and return an empty cache for it."""
        return cls(compile_plan(option_shape, registry=registry), tag_name)

    @property
    def plan(self) -> DecodingPlan:
        return self._plan

    @property
    def tag_name(self) -> str:
        return self._tag_name

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, subject: Any) -> Tags | None:
        """Cached tags for *subject*, or None. Never decodes."""
        with self._lock:
            return self._entries.get(subject)

    def get_or_decode(self, subject: Any) -> Tags:
        """Cached tags for *subject*, decoding (once) on a miss.

        Raises:
            TagError: Whatever the decode raised; nothing is cached.
        """
        return self._join_or_decode(subject, replace=False)

    def add(self, subject: Any) -> Tags:
        """Decode *subject* and store the result, replacing any existing entry.

        A decode already in flight for *subject* is joined rather than
        duplicated. On failure the previous entry, if any, is kept.
        """
        return self._join_or_decode(subject, replace=True)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, subject: object) -> bool:
        with self._lock:
            return subject in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _join_or_decode(self, subject: Any, *, replace: bool) -> Tags:
        with self._lock:
            tags = None if replace else self._entries.get(subject)
            if tags is not None:
                logger.debug("Tag cache hit for %r", subject)
                return tags
            future = self._inflight.get(subject)
            leader = future is None
            if future is None:
                future = Future()
                self._inflight[subject] = future

        if not leader:
            logger.debug("Waiting on in-flight decode for %r", subject)
            return future.result()
        logger.debug("Tag cache miss for %r", subject)
        return self._decode_and_store(subject, future)

    def _decode_and_store(self, subject: Any, future: Future[Tags]) -> Tags:
        try:
            tags = decode(self._plan, subject, self._tag_name)
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(subject, None)
            future.set_exception(exc)
            raise

        with self._lock:
            self._entries[subject] = tags
            self._inflight.pop(subject, None)
        future.set_result(tags)
        logger.debug("Stored %d field tags for %r", len(tags), subject)
        return tags
