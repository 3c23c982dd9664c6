"""Output mode dispatch: JSON for machines, Rich text for humans."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from structtags.output.renderers import render_result

if TYPE_CHECKING:
    from structtags.services.result import OpResult


class OutputSettings(BaseModel):
    """How a result should be rendered."""

    model_config = {"frozen": True}

    json_output: bool = False
    verbose: bool = False


def format_result(result: OpResult, *, settings: OutputSettings | None = None) -> str:
    """Format *result* as JSON or human-readable text."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    return render_result(result, verbose=settings.verbose)
