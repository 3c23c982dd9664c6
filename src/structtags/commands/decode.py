"""Command: decode a subject shape's annotations against an option shape."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from structtags.commands._base import ExamplesCommand

if TYPE_CHECKING:
    from structtags.commands._context import AppContext


@click.command(
    cls=ExamplesCommand,
    examples="""\
  structtags decode myapp.tags:JsonOptions myapp.models:User --tag json
  structtags --json decode myapp.tags:JsonOptions myapp.models:User""",
)
@click.argument("options_ref")
@click.argument("subject_ref")
@click.option("--tag", "tag_name", default=None, help="Annotation name to read (default: config).")
@click.pass_obj
def decode(app: AppContext, options_ref: str, subject_ref: str, tag_name: str | None) -> None:
    """Decode SUBJECT_REF's field annotations using the options at OPTIONS_REF."""
    app.emit(app.service.decode(options_ref, subject_ref, tag_name=tag_name))
