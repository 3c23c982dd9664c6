"""Resolver tree — type-directed strategies that turn one raw value into one typed value.

Seven variants, chosen once per declared option by :func:`build_resolver`
(most specific first):

    name-carrier -> custom capability -> duration -> list -> pointer -> bool -> default

``ListResolver`` and ``PointerResolver`` wrap the resolver of their element
type; ``NameResolver`` wraps the resolver the option would have without the
name-carrier key. All resolvers are immutable and shared across decodes.
"""

from __future__ import annotations

import types
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Protocol, Union, get_args, get_origin

from structtags.domain.convert import convert, parse_duration
from structtags.domain.errors import UnsupportedKindError
from structtags.domain.kinds import PrimitiveKind, primitive_kind, strip_annotated
from structtags.domain.tokenizer import split_elements

if TYPE_CHECKING:
    from structtags.domain.fields import FieldDescriptor

NAME_KEY = "$name"
CUSTOM_HOOK_ATTR = "resolve_tag_option"

ResolveHook = Callable[["FieldDescriptor", str], Any]


class TagOptionResolver(Protocol):
    """Capability a type exposes to own the decoding of its values.

    Implement it as a classmethod (or staticmethod) so it can be called on
    the type itself::

        class Color:
            @classmethod
            def resolve_tag_option(cls, field, value):
                return cls.parse(value)
    """

    def resolve_tag_option(self, field: FieldDescriptor, value: str) -> Any: ...


class ResolverRegistry:
    """Resolve hooks for types that cannot carry ``resolve_tag_option`` themselves.

    Lookups are by exact type. Populated directly or by the plugin manager.
    """

    def __init__(self, hooks: dict[Any, ResolveHook] | None = None) -> None:
        self._hooks: dict[Any, ResolveHook] = dict(hooks or {})

    def register(self, tp: Any, hook: ResolveHook, *, replace: bool = False) -> None:
        """Register *hook* for *tp*.

        Raises:
            ValueError: If *tp* already has a hook and *replace* is False.
        """
        if tp in self._hooks and not replace:
            msg = f"A tag resolver for {tp!r} is already registered"
            raise ValueError(msg)
        self._hooks[tp] = hook

    def lookup(self, tp: Any) -> ResolveHook | None:
        try:
            return self._hooks.get(tp)
        except TypeError:
            return None

    def __contains__(self, tp: object) -> bool:
        return self.lookup(tp) is not None

    def __iter__(self) -> Iterator[Any]:
        return iter(self._hooks)

    def __len__(self) -> int:
        return len(self._hooks)


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


class Resolver(ABC):
    """Converts the raw value of one option into its typed value."""

    @abstractmethod
    def resolve(self, field: FieldDescriptor, value: str) -> Any:
        """Return the typed value, raising on failure."""


@dataclass(frozen=True)
class DefaultResolver(Resolver):
    kind: PrimitiveKind

    def resolve(self, field: FieldDescriptor, value: str) -> Any:
        return convert(value, self.kind)


@dataclass(frozen=True)
class BoolResolver(Resolver):
    """A bare flag (value equal to its own key) means True."""

    key: str

    def resolve(self, field: FieldDescriptor, value: str) -> Any:
        if value == self.key:
            return True
        return convert(value, PrimitiveKind.BOOL)


@dataclass(frozen=True)
class PointerResolver(Resolver):
    """Optional slot: holds the inner value once resolved, None otherwise."""

    inner: Resolver

    def resolve(self, field: FieldDescriptor, value: str) -> Any:
        return self.inner.resolve(field, value)


@dataclass(frozen=True)
class ListResolver(Resolver):
    """Splits bracket contents with the tag quoting rule and resolves each element."""

    inner: Resolver

    def resolve(self, field: FieldDescriptor, value: str) -> Any:
        return [self.inner.resolve(field, element) for element in split_elements(value)]


@dataclass(frozen=True)
class DurationResolver(Resolver):
    def resolve(self, field: FieldDescriptor, value: str) -> Any:
        return parse_duration(value)


@dataclass(frozen=True)
class NameResolver(Resolver):
    """An empty value falls back to the field's own declared name."""

    inner: Resolver

    def resolve(self, field: FieldDescriptor, value: str) -> Any:
        return self.inner.resolve(field, value or field.name)


@dataclass(frozen=True)
class CustomResolver(Resolver):
    hook: ResolveHook

    def resolve(self, field: FieldDescriptor, value: str) -> Any:
        return self.hook(field, value)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def custom_hook(annotation: Any, registry: ResolverRegistry | None = None) -> ResolveHook | None:
    """Return the resolve hook *annotation* supplies, if any.

    The type's own ``resolve_tag_option`` wins over a registry entry.
    """
    base, _ = strip_annotated(annotation)
    hook = getattr(base, CUSTOM_HOOK_ATTR, None) if isinstance(base, type) else None
    if callable(hook):
        return hook
    if registry is not None:
        return registry.lookup(base)
    return None


def optional_inner(annotation: Any) -> Any | None:
    """For ``X | None`` return ``X``; None for anything else."""
    origin = get_origin(annotation)
    if origin is not Union and origin is not types.UnionType:
        return None
    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    if len(args) != 1 or len(get_args(annotation)) != 2:
        return None
    return args[0]


def build_resolver(
    annotation: Any,
    key: str,
    *,
    field_name: str = "",
    registry: ResolverRegistry | None = None,
    _in_list: bool = False,
) -> Resolver:
    """Select and build the resolver for an option declared as *annotation*.

    Raises:
        UnsupportedKindError: If no variant applies and the type supplies no
            custom capability (maps, callables, tuples, nested records,
            lists of lists, ...).
    """
    if key == NAME_KEY:
        inner = build_resolver(
            annotation, "", field_name=field_name, registry=registry, _in_list=_in_list
        )
        return NameResolver(inner)

    hook = custom_hook(annotation, registry)
    if hook is not None:
        return CustomResolver(hook)

    base, _ = strip_annotated(annotation)
    if base is timedelta:
        return DurationResolver()

    if get_origin(base) is list:
        args = get_args(base)
        if _in_list or len(args) != 1:
            raise UnsupportedKindError(field_name, annotation)
        element = build_resolver(
            args[0], key, field_name=field_name, registry=registry, _in_list=True
        )
        return ListResolver(element)

    pointee = optional_inner(base)
    if pointee is not None:
        inner = build_resolver(
            pointee, key, field_name=field_name, registry=registry, _in_list=_in_list
        )
        return PointerResolver(inner)

    kind = primitive_kind(annotation)
    if kind is PrimitiveKind.BOOL:
        return BoolResolver(key)
    if kind is not None:
        return DefaultResolver(kind)
    raise UnsupportedKindError(field_name, annotation)
