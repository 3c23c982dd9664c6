"""Error taxonomy for plan compilation and tag decoding.

Every error carries a stable ``code`` so the service layer can surface it
in an :class:`~structtags.services.result.OpError` without string matching.

- SchemaError: the option shape can never produce a plan.
- GrammarError: a raw annotation string is malformed as a whole.
- ConversionError: one option value could not be converted.
- MissingRequiredOptionsError: required keys were never satisfied.
"""

from __future__ import annotations

from collections.abc import Iterable


class TagError(Exception):
    """Base class for all structtags errors."""

    code = "TAG_ERROR"


class SchemaError(TagError):
    """The option shape is invalid; no decoding plan can be produced."""

    code = "SCHEMA_ERROR"


class InvalidShapeError(SchemaError):
    """The option or subject shape is not a fixed-field record."""

    code = "INVALID_SHAPE"


class DuplicateKeyError(SchemaError):
    """Two option fields resolve to the same key."""

    code = "DUPLICATE_KEY"

    def __init__(self, key: str, fields: Iterable[str]) -> None:
        self.key = key
        self.fields = tuple(fields)
        super().__init__(f"tag {key!r} is in use by multiple fields: {', '.join(self.fields)}")


class UnsupportedKindError(SchemaError):
    """An option's type has no native resolver and no custom capability."""

    code = "UNSUPPORTED_KIND"

    def __init__(self, field_name: str, annotation: object) -> None:
        self.field_name = field_name
        self.annotation = annotation
        super().__init__(f"unsupported type for struct tag field {field_name!r}: {annotation!r}")


class GrammarError(TagError, ValueError):
    """Unterminated quote or bracket (or trailing junk) in a raw tag string."""

    code = "GRAMMAR_ERROR"

    def __init__(self, message: str, *, raw: str, position: int) -> None:
        self.raw = raw
        self.position = position
        super().__init__(f"{message} at position {position} in {raw!r}")


class ConversionError(TagError, ValueError):
    """A raw option value could not be converted to its target kind."""

    code = "CONVERSION_ERROR"

    def __init__(self, raw: str, kind: str, reason: str = "") -> None:
        self.raw = raw
        self.kind = kind
        msg = f"cannot convert {raw!r} to {kind}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class MissingRequiredOptionsError(TagError):
    """One or more required option keys were never satisfied for a field."""

    code = "MISSING_REQUIRED"

    def __init__(self, field_name: str, missing: Iterable[str]) -> None:
        self.field_name = field_name
        self.missing = tuple(sorted(missing))
        super().__init__(
            f"missing required tag fields for {field_name!r}: {', '.join(self.missing)}"
        )
