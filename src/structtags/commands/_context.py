"""AppContext — shared Click context for all commands.

Created once by the root group; subcommands receive it via
``@click.pass_obj``. The TagService is built lazily so ``--help`` never
loads plugins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from structtags.config.logging import configure_logging
from structtags.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from structtags.config.settings import StructTagsSettings
    from structtags.services.result import OpResult
    from structtags.services.tags import TagService


class AppContext:
    """Settings, lazily built service, and result emission."""

    def __init__(self, settings: StructTagsSettings) -> None:
        self.settings = settings
        self._service: TagService | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def service(self) -> TagService:
        if self._service is None:
            from structtags.services.tags import TagService

            self._service = TagService(self.settings)
        return self._service

    def emit(self, result: OpResult) -> None:
        """Print *result*; failures go to stderr and exit with code 1."""
        output = format_result(
            result,
            settings=OutputSettings(
                json_output=self.settings.json_output,
                verbose=self.settings.verbose,
            ),
        )
        if result.ok:
            click.echo(output)
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
