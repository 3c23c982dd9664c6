"""Tests for the plan command."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from click.testing import CliRunner

from structtags.cli import cli
from structtags.domain.fields import tag

MODULE = __name__


@dataclass
class JsonOptions:
    name: str = field(default="", metadata=tag(structtag="$name"))
    omitempty: bool = False


@dataclass
class Clashing:
    a: str = field(default="", metadata=tag(structtag="k"))
    b: str = field(default="", metadata=tag(structtag="k"))


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


class TestPlanCommand:
    def test_human_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["plan", f"{MODULE}:JsonOptions"])
        assert result.exit_code == 0
        assert "shape: JsonOptions" in result.output
        assert "name[string]" in result.output
        assert "omitempty" in result.output

    def test_json_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "plan", f"{MODULE}:JsonOptions"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [o["key"] for o in data["data"]["options"]] == ["$name", "omitempty"]

    def test_duplicate_key(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["plan", f"{MODULE}:Clashing"])
        assert result.exit_code == 1
        assert "DUPLICATE_KEY" in result.output

    def test_bad_reference(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["plan", "not-a-reference"])
        assert result.exit_code == 1
        assert "BAD_REFERENCE" in result.output
