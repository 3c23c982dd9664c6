"""Field descriptors — the per-shape table the compiler and decoder consume.

Raw annotation strings live in field metadata under the ``"tags"`` key::

    @dataclass
    class User:
        name: str = field(default="", metadata=tag(json="userName,omitempty"))

    class Account(BaseModel):
        id: int = Field(0, json_schema_extra=tag(json="id"))

:func:`describe` turns a dataclass or pydantic model into a :class:`Shape`
once; callers may also declare a :class:`Shape` by hand.
"""

from __future__ import annotations

import dataclasses
import functools
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, get_type_hints

from pydantic import BaseModel

from structtags.domain.errors import InvalidShapeError

TAGS_METADATA_KEY = "tags"
# dataclasses.MISSING cannot be a dataclass field default, so descriptors use their own.
NO_DEFAULT: Any = object()


def tag(**annotations: str) -> dict[str, dict[str, str]]:
    """Build field metadata carrying raw annotation strings keyed by tag name."""
    return {TAGS_METADATA_KEY: dict(annotations)}


@dataclass(frozen=True)
class FieldDescriptor:
    """One field of a record shape.

    Attributes:
        name: Declared field name.
        ordinal: Position in declaration order.
        annotation: Declared type (``Annotated`` extras preserved).
        tags: Raw annotation strings keyed by tag name.
        exported: False for ``_private`` fields; the decoder skips them.
        embedded: True for embedded/flattened fields; the decoder skips them.
        default: Declared default value, or ``NO_DEFAULT``.
        default_factory: Declared default factory, or None.
    """

    name: str
    ordinal: int
    annotation: Any = str
    tags: Mapping[str, str] = field(default_factory=dict)
    exported: bool = True
    embedded: bool = False
    default: Any = NO_DEFAULT
    default_factory: Callable[[], Any] | None = None

    def raw_tag(self, tag_name: str) -> str:
        """Raw annotation for *tag_name*, or ``""`` when the field has none."""
        return self.tags.get(tag_name, "")

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT or self.default_factory is not None

    def make_default(self) -> Any:
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


@dataclass(frozen=True, eq=False)
class Shape:
    """A statically declared record shape.

    Equality is identity, so a Shape is usable as a cache key exactly like
    the class it was described from.
    """

    name: str
    fields: tuple[FieldDescriptor, ...]
    factory: Callable[..., Any] = dict

    def build(self, values: Mapping[str, Any]) -> Any:
        return self.factory(**values)


def is_record(obj: Any) -> bool:
    """True for dataclass types, pydantic model types and Shape tables."""
    if isinstance(obj, Shape):
        return True
    if not isinstance(obj, type):
        return False
    return dataclasses.is_dataclass(obj) or issubclass(obj, BaseModel)


def describe(shape: Any) -> Shape:
    """Return the field table for *shape*.

    Raises:
        InvalidShapeError: If *shape* is not a dataclass, pydantic model or Shape.
    """
    if isinstance(shape, Shape):
        return shape
    if not is_record(shape):
        msg = f"expected a dataclass, pydantic model or Shape, got {shape!r}"
        raise InvalidShapeError(msg)
    return _describe_class(shape)


@functools.cache
def _describe_class(cls: type) -> Shape:
    if dataclasses.is_dataclass(cls):
        hints = get_type_hints(cls, include_extras=True)
        return Shape(name=cls.__qualname__, fields=_dataclass_fields(cls, hints), factory=cls)
    return Shape(name=cls.__qualname__, fields=_model_fields(cls), factory=cls.model_construct)


def _dataclass_fields(cls: type, hints: dict[str, Any]) -> tuple[FieldDescriptor, ...]:
    descriptors: list[FieldDescriptor] = []
    for ordinal, f in enumerate(dataclasses.fields(cls)):
        if not f.init:
            continue
        factory = None if f.default_factory is dataclasses.MISSING else f.default_factory
        default = NO_DEFAULT if f.default is dataclasses.MISSING else f.default
        descriptors.append(
            FieldDescriptor(
                name=f.name,
                ordinal=ordinal,
                annotation=hints.get(f.name, f.type),
                tags=dict(f.metadata.get(TAGS_METADATA_KEY, {})),
                exported=not f.name.startswith("_"),
                default=default,
                default_factory=factory,
            )
        )
    return tuple(descriptors)


def _model_fields(cls: type[BaseModel]) -> tuple[FieldDescriptor, ...]:
    descriptors: list[FieldDescriptor] = []
    for ordinal, (name, info) in enumerate(cls.model_fields.items()):
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        tags = extra.get(TAGS_METADATA_KEY, {})
        factory = None
        if not info.is_required():
            factory = functools.partial(info.get_default, call_default_factory=True)
        # pydantic moves top-level Annotated extras into FieldInfo.metadata
        annotation: Any = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        descriptors.append(
            FieldDescriptor(
                name=name,
                ordinal=ordinal,
                annotation=annotation,
                tags=dict(tags) if isinstance(tags, Mapping) else {},
                default_factory=factory,
            )
        )
    return tuple(descriptors)
