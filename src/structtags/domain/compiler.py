"""Schema compiler — turns an option shape into an immutable DecodingPlan.

Each option field declares its key and flags in the reserved ``structtag``
annotation::

    @dataclass
    class JsonOptions:
        name: str = field(default="", metadata=tag(structtag="$name"))
        omitempty: bool = False                      # key: "omitempty"
        version: int = field(default=0, metadata=tag(structtag="v,required"))
        internal: str = field(default="", metadata=tag(structtag="-"))

INVARIANT: A plan is pure with respect to its shape. Compile once, decode many.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from types import MappingProxyType
from typing import Any, get_origin

from structtags.domain.errors import DuplicateKeyError
from structtags.domain.fields import FieldDescriptor, Shape, describe
from structtags.domain.kinds import primitive_kind, strip_annotated, zero_value
from structtags.domain.resolvers import (
    NAME_KEY,
    Resolver,
    ResolverRegistry,
    build_resolver,
    optional_inner,
)

logger = logging.getLogger(__name__)

STRUCT_TAG = "structtag"
SKIP_KEY = "-"
REQUIRED_FLAG = "required"


@dataclass(frozen=True)
class DeclaredOption:
    """One recognized option key bound to its target field and resolver."""

    key: str
    field_name: str
    ordinal: int
    required: bool
    resolver: Resolver


@dataclass(frozen=True, eq=False)
class DecodingPlan:
    """Compiled lookup table for one option shape.

    Attributes:
        shape: Field table of the option shape.
        options: Option key -> DeclaredOption.
        has_name: Whether a ``$name`` option exists (position 0 is the name).
        required_keys: Keys that every decoded field must satisfy.
        defaults: Field name -> factory for its default value.
    """

    shape: Shape
    options: Mapping[str, DeclaredOption]
    has_name: bool
    required_keys: frozenset[str]
    defaults: Mapping[str, Callable[[], Any]]

    def new_values(self) -> dict[str, Any]:
        """Fresh default values for every constructor field of the shape."""
        return {name: make() for name, make in self.defaults.items()}

    def build(self, values: Mapping[str, Any]) -> Any:
        """Instantiate the option shape from *values*."""
        return self.shape.build(values)


def parse_option_tag(raw: str | None, field_name: str) -> tuple[str | None, bool]:
    """Parse a ``structtag`` annotation into ``(key, required)``.

    An absent annotation keys the option by the lower-cased field name.
    A first element of ``-`` or ``""`` means the field is not an option
    (key None).
    """
    if raw is None:
        return field_name.lower(), False
    first, *flags = raw.split(",")
    required = REQUIRED_FLAG in flags
    if first in ("", SKIP_KEY):
        return None, required
    return first, required


def zero_for(annotation: Any) -> Any:
    """Zero value of a declared option type (None when there is no natural zero)."""
    base, _ = strip_annotated(annotation)
    if optional_inner(base) is not None:
        return None
    if get_origin(base) is list:
        return []
    if base is timedelta:
        return timedelta(0)
    kind = primitive_kind(annotation)
    if kind is not None:
        return zero_value(kind)
    return None


def _default_factory(descriptor: FieldDescriptor) -> Callable[[], Any]:
    if descriptor.has_default:
        return descriptor.make_default
    return functools.partial(zero_for, descriptor.annotation)


def compile_plan(option_shape: Any, *, registry: ResolverRegistry | None = None) -> DecodingPlan:
    """Compile *option_shape* into a :class:`DecodingPlan`.

    Args:
        option_shape: Dataclass, pydantic model or :class:`Shape` describing
            the options.
        registry: Resolve hooks for types that do not supply their own.

    Raises:
        InvalidShapeError: If *option_shape* is not a record shape.
        DuplicateKeyError: If two fields resolve to the same key.
        UnsupportedKindError: If a field type has no resolver.
    """
    table = describe(option_shape)
    options: dict[str, DeclaredOption] = {}
    defaults: dict[str, Callable[[], Any]] = {}
    required: set[str] = set()

    for descriptor in table.fields:
        defaults[descriptor.name] = _default_factory(descriptor)
        if not descriptor.exported and not descriptor.embedded:
            continue
        key, is_required = parse_option_tag(descriptor.tags.get(STRUCT_TAG), descriptor.name)
        if key is None:
            continue
        if key in options:
            raise DuplicateKeyError(key, (options[key].field_name, descriptor.name))
        resolver = build_resolver(
            descriptor.annotation, key, field_name=descriptor.name, registry=registry
        )
        options[key] = DeclaredOption(
            key=key,
            field_name=descriptor.name,
            ordinal=descriptor.ordinal,
            required=is_required,
            resolver=resolver,
        )
        if is_required:
            required.add(key)

    plan = DecodingPlan(
        shape=table,
        options=MappingProxyType(options),
        has_name=NAME_KEY in options,
        required_keys=frozenset(required),
        defaults=MappingProxyType(defaults),
    )
    logger.debug(
        "Compiled plan for %s: %d options, %d required",
        table.name,
        len(options),
        len(required),
    )
    return plan


class PlanCompiler:
    """Memoizes :func:`compile_plan` per option shape for one registry.

    Failed compilations are not memoized.
    """

    def __init__(self, registry: ResolverRegistry | None = None) -> None:
        self._registry = registry
        self._plans: dict[Any, DecodingPlan] = {}
        self._lock = threading.Lock()

    @property
    def registry(self) -> ResolverRegistry | None:
        return self._registry

    def compile(self, option_shape: Any) -> DecodingPlan:
        describe(option_shape)  # rejects non-records before they are used as keys
        with self._lock:
            plan = self._plans.get(option_shape)
            if plan is None:
                plan = compile_plan(option_shape, registry=self._registry)
                self._plans[option_shape] = plan
            return plan
