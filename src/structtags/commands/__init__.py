"""Subcommand modules for structtags.

Provides register_commands() with deferred imports to keep
``structtags --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from structtags.commands.decode import decode
    from structtags.commands.plan import plan
    from structtags.commands.tokenize import tokenize

    cli.add_command(tokenize)
    cli.add_command(plan)
    cli.add_command(decode)
