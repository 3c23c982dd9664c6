"""Tests for operation-specific Rich renderers."""

from structtags.output.renderers import render_result
from structtags.services.result import OpError, OpResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> OpResult:
    return OpResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> OpResult:
    return OpResult(
        ok=False,
        op=op,
        error=OpError(code=code, message=message, detail=dict(detail)),
    )


# ── Error rendering ──────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("tokenize", "GRAMMAR_ERROR", "missing closing quote"))
        assert "ERROR" in output
        assert "tokenize" in output
        assert "[GRAMMAR_ERROR]" in output
        assert "missing closing quote" in output

    def test_verbose_shows_detail(self) -> None:
        result = _err("decode", "MISSING_REQUIRED", "missing", field_name="Name", missing=["r"])
        output = render_result(result, verbose=True)
        assert "field_name" in output
        assert "Name" in output
        assert '["r"]' in output

    def test_detail_hidden_without_verbose(self) -> None:
        result = _err("decode", "MISSING_REQUIRED", "missing", field_name="Name")
        assert "field_name" not in render_result(result)

    def test_no_error_object(self) -> None:
        output = render_result(OpResult(ok=False, op="test"))
        assert "Unknown error" in output

    def test_markup_in_message_is_literal(self) -> None:
        output = render_result(_err("tokenize", "GRAMMAR_ERROR", "bad [bold]x[/bold]"))
        assert "[bold]x[/bold]" in output


# ── Operation renderers ──────────────────────────────────────────────


class TestTokenizeRenderer:
    def test_rows(self) -> None:
        result = _ok(
            "tokenize",
            raw="name,s=x",
            tokens=[
                {"key": None, "value": "name", "position": 0},
                {"key": "s", "value": "x", "position": 5},
            ],
        )
        output = render_result(result)
        assert output.startswith("OK")
        assert "'name'" in output
        assert "'x'" in output

    def test_bracketed_values_survive(self) -> None:
        result = _ok(
            "tokenize",
            raw="ia=[1,2]",
            tokens=[{"key": "ia", "value": "[red]", "position": 0}],
        )
        assert "'[red]'" in render_result(result)


class TestPlanRenderer:
    def test_rows(self) -> None:
        result = _ok(
            "plan",
            shape="JsonOptions",
            has_name=True,
            required=["v"],
            options=[
                {"key": "$name", "field": "name", "required": False, "resolver": "name[string]"},
                {"key": "v", "field": "version", "required": True, "resolver": "int"},
            ],
        )
        output = render_result(result)
        assert "shape: JsonOptions" in output
        assert "$name" in output
        assert "name[string]" in output
        assert "yes" in output


class TestDecodeRenderer:
    def test_rows(self) -> None:
        result = _ok(
            "decode",
            subject="app:User",
            tag_name="json",
            cached=False,
            fields=[
                {"field_name": "user_name", "field_index": 1, "value": {"name": "userName"}},
            ],
        )
        output = render_result(result)
        assert "app:User [json]" in output
        assert "user_name" in output
        assert '{"name":"userName"}' in output


class TestGenericRenderer:
    def test_unknown_op(self) -> None:
        output = render_result(_ok("other", items=[1, 2]))
        assert "items" in output
        assert "[1,2]" in output
