"""TagService — tokenize, compile and decode behind the OpResult contract.

Shapes are addressed by import reference (``package.module:Attr``) so the
CLI can point at any dataclass, pydantic model or Shape table on sys.path.
Compiled plans and decoded-record caches live as long as the service.
"""

from __future__ import annotations

import dataclasses
import importlib
import logging
import threading
from datetime import timedelta
from typing import Any

from pydantic import BaseModel

from structtags.config.settings import StructTagsSettings
from structtags.domain.compiler import PlanCompiler
from structtags.domain.decoder import decode
from structtags.domain.errors import TagError
from structtags.domain.fields import describe
from structtags.domain.resolvers import (
    BoolResolver,
    CustomResolver,
    DefaultResolver,
    DurationResolver,
    ListResolver,
    NameResolver,
    PointerResolver,
    Resolver,
)
from structtags.domain.tokenizer import tokenize
from structtags.infrastructure.cache import TagCache
from structtags.plugins.manager import PluginManager
from structtags.services.result import OpError, OpResult

logger = logging.getLogger(__name__)


class UnresolvedReferenceError(LookupError):
    """An import reference could not be resolved."""


def resolve_ref(ref: str) -> Any:
    """Import ``module:attr.path`` and return the attribute.

    Raises:
        UnresolvedReferenceError: If the reference is malformed or does not resolve.
    """
    module_name, sep, attr_path = ref.partition(":")
    if not sep or not module_name or not attr_path:
        msg = f"Expected 'module:attribute', got {ref!r}"
        raise UnresolvedReferenceError(msg)
    try:
        target: Any = importlib.import_module(module_name)
        for part in attr_path.split("."):
            target = getattr(target, part)
    except (ImportError, AttributeError) as exc:
        msg = f"Cannot resolve {ref!r}: {exc}"
        raise UnresolvedReferenceError(msg) from exc
    return target


def resolver_label(resolver: Resolver) -> str:
    """Compact description of a resolver tree, e.g. ``list[pointer[int8]]``."""
    if isinstance(resolver, NameResolver):
        return f"name[{resolver_label(resolver.inner)}]"
    if isinstance(resolver, PointerResolver):
        return f"pointer[{resolver_label(resolver.inner)}]"
    if isinstance(resolver, ListResolver):
        return f"list[{resolver_label(resolver.inner)}]"
    if isinstance(resolver, BoolResolver):
        return "bool"
    if isinstance(resolver, DurationResolver):
        return "duration"
    if isinstance(resolver, DefaultResolver):
        return str(resolver.kind)
    if isinstance(resolver, CustomResolver):
        return f"custom[{getattr(resolver.hook, '__qualname__', repr(resolver.hook))}]"
    return type(resolver).__name__


def to_jsonable(value: Any) -> Any:
    """Convert decoded option values into JSON-friendly data."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, complex):
        return str(value)
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, BaseModel):
        return {name: to_jsonable(getattr(value, name)) for name in type(value).model_fields}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    return str(value)


def _reference_error(exc: UnresolvedReferenceError) -> OpError:
    return OpError(code="BAD_REFERENCE", message=str(exc))


class TagService:
    """Settings-driven facade over the tokenizer, compiler, decoder and cache."""

    def __init__(
        self,
        settings: StructTagsSettings | None = None,
        *,
        plugin_manager: PluginManager | None = None,
    ) -> None:
        self._settings = settings or StructTagsSettings()
        self._plugin_manager = plugin_manager
        self._compiler: PlanCompiler | None = None
        self._caches: dict[tuple[Any, str], TagCache[Any]] = {}
        self._lock = threading.Lock()

    @property
    def settings(self) -> StructTagsSettings:
        return self._settings

    @property
    def compiler(self) -> PlanCompiler:
        """Plan compiler, created lazily with plugin resolvers when enabled."""
        if self._compiler is None:
            registry = None
            if self._settings.plugins.enabled:
                if self._plugin_manager is None:
                    self._plugin_manager = PluginManager()
                if not self._plugin_manager.is_loaded:
                    self._plugin_manager.discover_and_load()
                registry = self._plugin_manager.registry
            self._compiler = PlanCompiler(registry)
        return self._compiler

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tokenize(self, raw: str) -> OpResult:
        """Split a raw tag string into its entries."""
        op = "tokenize"
        try:
            tokens = tokenize(raw)
        except TagError as exc:
            return OpResult.failure(op, OpError.from_exception(exc))
        return OpResult.success(
            op,
            {
                "raw": raw,
                "tokens": [
                    {"key": t.key, "value": t.value, "position": t.position} for t in tokens
                ],
            },
        )

    def plan(self, option_ref: str) -> OpResult:
        """Compile the option shape at *option_ref* and describe the plan."""
        op = "plan"
        try:
            plan = self.compiler.compile(resolve_ref(option_ref))
        except UnresolvedReferenceError as exc:
            return OpResult.failure(op, _reference_error(exc))
        except TagError as exc:
            return OpResult.failure(op, OpError.from_exception(exc))

        options = [
            {
                "key": option.key,
                "field": option.field_name,
                "required": option.required,
                "resolver": resolver_label(option.resolver),
            }
            for option in sorted(plan.options.values(), key=lambda o: o.ordinal)
        ]
        return OpResult.success(
            op,
            {
                "shape": plan.shape.name,
                "has_name": plan.has_name,
                "required": sorted(plan.required_keys),
                "options": options,
            },
        )

    def decode(self, option_ref: str, subject_ref: str, *, tag_name: str | None = None) -> OpResult:
        """Decode the *tag_name* annotations of *subject_ref* against *option_ref*."""
        op = "decode"
        tag = tag_name or self._settings.decode.tag_name
        try:
            option_shape = resolve_ref(option_ref)
            subject = resolve_ref(subject_ref)
        except UnresolvedReferenceError as exc:
            return OpResult.failure(op, _reference_error(exc))

        cached = False
        try:
            plan = self.compiler.compile(option_shape)
            shape = describe(subject)
            if self._settings.decode.cache:
                cache = self._cache_for(option_shape, tag)
                cached = subject in cache
                tags = cache.get_or_decode(subject)
            else:
                tags = decode(plan, subject, tag)
        except TagError as exc:
            logger.debug("Decode of %s failed: %s", subject_ref, exc)
            return OpResult.failure(op, OpError.from_exception(exc))

        warnings: list[str] = []
        if not any(f.raw_tag(tag) for f in shape.fields if f.exported and not f.embedded):
            warnings.append(f"no field of {shape.name} carries a '{tag}' annotation")

        return OpResult.success(
            op,
            {
                "subject": subject_ref,
                "tag_name": tag,
                "cached": cached,
                "fields": [
                    {
                        "field_name": t.field_name,
                        "field_index": t.field_index,
                        "value": to_jsonable(t.value),
                    }
                    for t in tags
                ],
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cache_for(self, option_shape: Any, tag: str) -> TagCache[Any]:
        key = (option_shape, tag)
        with self._lock:
            cache = self._caches.get(key)
            if cache is None:
                cache = TagCache(self.compiler.compile(option_shape), tag)
                self._caches[key] = cache
            return cache
