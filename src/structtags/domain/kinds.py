"""Primitive value kinds and their Python type aliases.

Python has a single ``int``, ``float`` and ``complex`` type, so sized kinds
are declared with ``Annotated`` aliases carrying a :class:`PrimitiveKind`:

    retries: Uint8 = 0
    ratio: Float32 = 0.0

Plain ``int``/``float``/``complex`` map to the 64/64/128-bit kinds.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, get_args, get_origin


class PrimitiveKind(StrEnum):
    """Value kinds the converter understands natively."""

    BOOL = "bool"
    STRING = "string"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    COMPLEX64 = "complex64"
    COMPLEX128 = "complex128"


Int8 = Annotated[int, PrimitiveKind.INT8]
Int16 = Annotated[int, PrimitiveKind.INT16]
Int32 = Annotated[int, PrimitiveKind.INT32]
Int64 = Annotated[int, PrimitiveKind.INT64]
Uint = Annotated[int, PrimitiveKind.UINT]
Uint8 = Annotated[int, PrimitiveKind.UINT8]
Uint16 = Annotated[int, PrimitiveKind.UINT16]
Uint32 = Annotated[int, PrimitiveKind.UINT32]
Uint64 = Annotated[int, PrimitiveKind.UINT64]
Float32 = Annotated[float, PrimitiveKind.FLOAT32]
Float64 = Annotated[float, PrimitiveKind.FLOAT64]
Complex64 = Annotated[complex, PrimitiveKind.COMPLEX64]
Complex128 = Annotated[complex, PrimitiveKind.COMPLEX128]

# Keyed by exact type: bool never falls through to int.
_BUILTIN_KINDS: dict[type, PrimitiveKind] = {
    bool: PrimitiveKind.BOOL,
    str: PrimitiveKind.STRING,
    int: PrimitiveKind.INT,
    float: PrimitiveKind.FLOAT64,
    complex: PrimitiveKind.COMPLEX128,
}

_ZERO_VALUES: dict[PrimitiveKind, Any] = {
    PrimitiveKind.BOOL: False,
    PrimitiveKind.STRING: "",
    PrimitiveKind.FLOAT32: 0.0,
    PrimitiveKind.FLOAT64: 0.0,
    PrimitiveKind.COMPLEX64: 0j,
    PrimitiveKind.COMPLEX128: 0j,
}


def strip_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *meta]`` into ``(T, meta)``; other types pass through."""
    if get_origin(annotation) is Annotated:
        base, *meta = get_args(annotation)
        return base, tuple(meta)
    return annotation, ()


def primitive_kind(annotation: Any) -> PrimitiveKind | None:
    """Return the primitive kind of *annotation*, or None if it is not primitive."""
    base, meta = strip_annotated(annotation)
    for item in meta:
        if isinstance(item, PrimitiveKind):
            return item
    if isinstance(base, type):
        return _BUILTIN_KINDS.get(base)
    return None


def zero_value(kind: PrimitiveKind) -> Any:
    """Zero value for a primitive kind (``0`` for every integer kind)."""
    return _ZERO_VALUES.get(kind, 0)
