"""Command: tokenize a raw tag string."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from structtags.commands._base import ExamplesCommand

if TYPE_CHECKING:
    from structtags.commands._context import AppContext


@click.command(
    cls=ExamplesCommand,
    examples="""\
  structtags tokenize "name,omitempty"
  structtags tokenize "s='has\\'quotes',ia=[-1,2]"
  structtags --json tokenize "d=5h30m\"""",
)
@click.argument("raw")
@click.pass_obj
def tokenize(app: AppContext, raw: str) -> None:
    """Split RAW into key/value entries."""
    app.emit(app.service.tokenize(raw))
