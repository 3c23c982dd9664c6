"""OpResult and OpError — the result contract of the service layer.

INVARIANT: TagService methods return OpResult and never raise TagError.
The CLI consumes this type for both JSON and human output.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from structtags.domain.errors import TagError


class OpError(BaseModel):
    """Structured error payload of a failed operation."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: TagError) -> OpError:
        """Map a TagError to its code, message and structured attributes."""
        detail: dict[str, Any] = {}
        for attr in ("key", "field_name", "position", "raw", "kind"):
            value = getattr(exc, attr, None)
            if value is not None:
                detail[attr] = value if isinstance(value, (str, int)) else str(value)
        missing = getattr(exc, "missing", None)
        if missing is not None:
            detail["missing"] = list(missing)
        return cls(code=exc.code, message=str(exc), detail=detail)


class OpResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``"tokenize"``, ``"plan"``, ``"decode"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues.
        error: Structured error when ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: OpError | None = None

    @classmethod
    def success(cls, op: str, data: dict[str, Any], warnings: list[str] | None = None) -> OpResult:
        return cls(ok=True, op=op, data=data, warnings=warnings or [])

    @classmethod
    def failure(cls, op: str, error: OpError) -> OpResult:
        return cls(ok=False, op=op, error=error)
