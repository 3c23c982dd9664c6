"""Command: compile an option shape and show its decoding plan."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from structtags.commands._base import ExamplesCommand

if TYPE_CHECKING:
    from structtags.commands._context import AppContext


@click.command(
    cls=ExamplesCommand,
    examples="""\
  structtags plan myapp.tags:JsonOptions
  structtags --json plan myapp.tags:JsonOptions""",
)
@click.argument("options_ref")
@click.pass_obj
def plan(app: AppContext, options_ref: str) -> None:
    """Compile the option shape at OPTIONS_REF (module:attribute)."""
    app.emit(app.service.plan(options_ref))
