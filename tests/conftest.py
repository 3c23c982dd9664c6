"""Shared pytest fixtures and test helpers for structtags tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
from click.testing import CliRunner

from structtags.config.models import PluginsConfig
from structtags.config.settings import StructTagsSettings
from structtags.services.tags import TagService


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host STRUCTTAGS_* variables out of every test."""
    for name in (
        "STRUCTTAGS_CONFIG",
        "STRUCTTAGS_JSON_OUTPUT",
        "STRUCTTAGS_VERBOSE",
        "STRUCTTAGS_LOG_JSON",
        "STRUCTTAGS_DECODE__TAG_NAME",
        "STRUCTTAGS_DECODE__CACHE",
        "STRUCTTAGS_PLUGINS__ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """CLI runs install a root handler; drop it after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pkg = logging.getLogger("structtags")
    pkg_level = pkg.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pkg.setLevel(pkg_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings() -> StructTagsSettings:
    """Default settings with plugin discovery turned off."""
    return StructTagsSettings(plugins=PluginsConfig(enabled=False))


@pytest.fixture
def service(settings: StructTagsSettings) -> TagService:
    return TagService(settings)
