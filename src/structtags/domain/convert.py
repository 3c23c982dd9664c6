"""Text-to-value conversion for primitive kinds and durations.

The accepted literal forms are deliberately narrower than Python's own
``int()``/``float()``/``complex()`` constructors: no surrounding whitespace,
no digit-group underscores, ``i`` (not ``j``) as the imaginary unit.
"""

from __future__ import annotations

import math
import re
import struct
from datetime import timedelta
from fractions import Fraction
from typing import Any

from structtags.domain.errors import ConversionError
from structtags.domain.kinds import PrimitiveKind

_TRUE_SPELLINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_SPELLINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

_SIGNED_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_UNSIGNED_RE = re.compile(r"[0-9]+", re.ASCII)
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.ASCII | re.IGNORECASE,
)

_INT_BITS: dict[PrimitiveKind, int] = {
    PrimitiveKind.INT8: 8,
    PrimitiveKind.INT16: 16,
    PrimitiveKind.INT32: 32,
    PrimitiveKind.INT64: 64,
    PrimitiveKind.INT: 64,
}

_UINT_BITS: dict[PrimitiveKind, int] = {
    PrimitiveKind.UINT8: 8,
    PrimitiveKind.UINT16: 16,
    PrimitiveKind.UINT32: 32,
    PrimitiveKind.UINT64: 64,
    PrimitiveKind.UINT: 64,
}

# Nanoseconds per unit suffix.
_DURATION_UNITS: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_DURATION_SEGMENT_RE = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]+)")


def convert(raw: str, kind: PrimitiveKind) -> Any:
    """Convert *raw* to a value of *kind*.

    Raises:
        ConversionError: If *raw* is not a valid literal for *kind*.
    """
    if kind is PrimitiveKind.STRING:
        return raw
    if kind is PrimitiveKind.BOOL:
        return _parse_bool(raw)
    if kind in _INT_BITS:
        return _parse_int(raw, kind, _INT_BITS[kind])
    if kind in _UINT_BITS:
        return _parse_uint(raw, kind, _UINT_BITS[kind])
    if kind in (PrimitiveKind.FLOAT32, PrimitiveKind.FLOAT64):
        return _parse_float(raw, kind)
    if kind in (PrimitiveKind.COMPLEX64, PrimitiveKind.COMPLEX128):
        return _parse_complex(raw, kind)
    raise ConversionError(raw, str(kind), "unable to convert string to kind")


def _parse_bool(raw: str) -> bool:
    if raw in _TRUE_SPELLINGS:
        return True
    if raw in _FALSE_SPELLINGS:
        return False
    raise ConversionError(raw, PrimitiveKind.BOOL, "invalid syntax")


def _parse_int(raw: str, kind: PrimitiveKind, bits: int) -> int:
    if _SIGNED_RE.fullmatch(raw) is None:
        raise ConversionError(raw, kind, "invalid syntax")
    value = _to_int(raw, kind)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ConversionError(raw, kind, "value out of range")
    return value


def _parse_uint(raw: str, kind: PrimitiveKind, bits: int) -> int:
    if _UNSIGNED_RE.fullmatch(raw) is None:
        raise ConversionError(raw, kind, "invalid syntax")
    value = _to_int(raw, kind)
    if value >= 1 << bits:
        raise ConversionError(raw, kind, "value out of range")
    return value


def _to_int(raw: str, kind: PrimitiveKind) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        # int() refuses literals past sys.get_int_max_str_digits()
        raise ConversionError(raw, kind, "value out of range") from exc


def _parse_float(raw: str, kind: PrimitiveKind) -> float:
    if _FLOAT_RE.fullmatch(raw) is None:
        raise ConversionError(raw, kind, "invalid syntax")
    value = float(raw)
    literal_inf = "inf" in raw.lower()
    if math.isinf(value) and not literal_inf:
        raise ConversionError(raw, kind, "value out of range")
    if kind is PrimitiveKind.FLOAT32:
        try:
            value = struct.unpack("f", struct.pack("f", value))[0]
        except OverflowError as exc:
            raise ConversionError(raw, kind, "value out of range") from exc
        # Some builds round past FLT_MAX to inf instead of raising.
        if math.isinf(value) and not literal_inf:
            raise ConversionError(raw, kind, "value out of range")
    return value


def _imaginary_split(body: str) -> int:
    """Index of the sign that starts the imaginary component, or 0."""
    for idx in range(len(body) - 1, 0, -1):
        if body[idx] in "+-" and body[idx - 1] not in "eE":
            return idx
    return 0


def _parse_complex(raw: str, kind: PrimitiveKind) -> complex:
    part_kind = PrimitiveKind.FLOAT32 if kind is PrimitiveKind.COMPLEX64 else PrimitiveKind.FLOAT64
    text = raw
    if len(text) >= 2 and text[0] == "(" and text[-1] == ")":
        text = text[1:-1]
    if not text:
        raise ConversionError(raw, kind, "invalid syntax")

    try:
        if not text.endswith("i"):
            return complex(_parse_float(text, part_kind), 0.0)

        body = text[:-1]
        split = _imaginary_split(body)
        real_text, imag_text = body[:split], body[split:]
        real = _parse_float(real_text, part_kind) if real_text else 0.0
        if imag_text in ("", "+", "-"):
            imag_text += "1"
        imag = _parse_float(imag_text, part_kind)
    except ConversionError as exc:
        raise ConversionError(raw, kind, "invalid syntax") from exc
    return complex(real, imag)


def parse_duration(raw: str) -> timedelta:
    """Parse a compound duration such as ``5h30m`` or ``-1.5s``.

    Units: ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m``, ``h``. A bare
    ``0`` is the only unit-less value accepted. Sub-microsecond remainders
    are rounded to timedelta's resolution.

    Raises:
        ConversionError: On a missing/unknown unit or malformed magnitude.
    """
    text = raw
    negative = False
    if text[:1] in ("+", "-"):
        negative = text[0] == "-"
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ConversionError(raw, "duration", "invalid duration")

    total_ns = Fraction(0)
    pos = 0
    while pos < len(text):
        match = _DURATION_SEGMENT_RE.match(text, pos)
        if match is None:
            raise ConversionError(raw, "duration", "missing unit in duration")
        whole, frac, unit = match.groups()
        if not whole and not frac:
            raise ConversionError(raw, "duration", "invalid duration")
        scale = _DURATION_UNITS.get(unit)
        if scale is None:
            raise ConversionError(raw, "duration", f"unknown unit {unit!r} in duration")
        try:
            magnitude = Fraction(f"{whole or 0}.{frac or 0}")
        except ValueError as exc:
            raise ConversionError(raw, "duration", "duration out of range") from exc
        total_ns += magnitude * scale
        pos = match.end()

    if negative:
        total_ns = -total_ns
    try:
        return timedelta(microseconds=float(total_ns / 1000))
    except OverflowError as exc:
        raise ConversionError(raw, "duration", "duration out of range") from exc
