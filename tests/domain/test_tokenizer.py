"""Tests for the tag grammar scanner."""

from __future__ import annotations

import pytest

from structtags.domain.errors import GrammarError
from structtags.domain.tokenizer import (
    Token,
    iter_tokens,
    scan_bare,
    scan_bracketed,
    scan_quoted,
    split_elements,
    tokenize,
)


def _escape(value: str) -> str:
    return value.replace("'", "\\'")


class TestScanners:
    def test_scan_quoted_returns_position_after_quote(self) -> None:
        assert scan_quoted("'abc',x", 0) == (5, "abc")

    def test_scan_quoted_unescapes_quote(self) -> None:
        assert scan_quoted("'it\\'s'", 0) == (7, "it's")

    def test_scan_bracketed(self) -> None:
        assert scan_bracketed("[1,2]", 0) == (5, "1,2")

    def test_scan_bracketed_unescapes_bracket(self) -> None:
        assert scan_bracketed("[a\\]b]", 0) == (6, "a]b")

    def test_scan_bare_stops_at_separator(self) -> None:
        assert scan_bare("abc,def", 0) == (3, "abc")

    def test_scan_bare_runs_to_end(self) -> None:
        assert scan_bare("abc", 1) == (3, "bc")


class TestTokenize:
    def test_bare_words(self) -> None:
        assert tokenize("name,omitempty") == [
            Token(key=None, value="name", position=0),
            Token(key=None, value="omitempty", position=5),
        ]

    def test_key_value(self) -> None:
        assert tokenize("v=1,s=abc") == [
            Token(key="v", value="1", position=0),
            Token(key="s", value="abc", position=4),
        ]

    def test_quoted_value_keeps_separators(self) -> None:
        assert tokenize("s='a,b',x") == [
            Token(key="s", value="a,b", position=0),
            Token(key=None, value="x", position=8),
        ]

    def test_bracketed_value_keeps_body(self) -> None:
        assert tokenize("ia=[1,2,3]") == [Token(key="ia", value="1,2,3", position=0)]

    def test_leading_empty_entry(self) -> None:
        tokens = tokenize(",omitempty")
        assert [t.value for t in tokens] == ["", "omitempty"]
        assert tokens[0].key is None

    def test_empty_middle_entry(self) -> None:
        assert [t.value for t in tokenize("a,,b")] == ["a", "", "b"]

    def test_trailing_separator_adds_nothing(self) -> None:
        assert [t.value for t in tokenize("a,b,")] == ["a", "b"]

    def test_empty_string(self) -> None:
        assert tokenize("") == []

    def test_key_with_empty_value(self) -> None:
        assert tokenize("s=") == [Token(key="s", value="", position=0)]

    def test_non_word_key_is_bare_value(self) -> None:
        assert tokenize("my-key=v") == [Token(key=None, value="my-key=v", position=0)]

    def test_bare_value_is_verbatim(self) -> None:
        assert tokenize("s=a\\'b") == [Token(key="s", value="a\\'b", position=0)]

    def test_iter_tokens_is_lazy(self) -> None:
        tokens = iter_tokens("a,b='unterminated")
        assert next(tokens) == Token(key=None, value="a", position=0)
        with pytest.raises(GrammarError):
            next(tokens)

    @pytest.mark.parametrize(
        "value",
        ["plain", "with, comma", "it's", "[brackets]", "a=b", "''", ""],
    )
    def test_quoting_round_trip(self, value: str) -> None:
        raw = "key='" + _escape(value) + "'"
        assert tokenize(raw) == [Token(key="key", value=value, position=0)]


class TestGrammarErrors:
    def test_unterminated_quote(self) -> None:
        with pytest.raises(GrammarError) as exc_info:
            tokenize("s='unterminated")
        assert exc_info.value.position == 2
        assert exc_info.value.raw == "s='unterminated"

    def test_unterminated_bracket(self) -> None:
        with pytest.raises(GrammarError, match="bracket"):
            tokenize("ia=[1,2")

    def test_escaped_final_quote_is_unterminated(self) -> None:
        with pytest.raises(GrammarError):
            tokenize("s='abc\\'")

    def test_junk_after_closing_quote(self) -> None:
        with pytest.raises(GrammarError) as exc_info:
            tokenize("s='a'b,x")
        assert exc_info.value.position == 5

    def test_junk_after_closing_bracket(self) -> None:
        with pytest.raises(GrammarError):
            tokenize("ia=[1]2")

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            tokenize("'")


class TestSplitElements:
    def test_simple(self) -> None:
        assert split_elements("1,2,3") == ["1", "2", "3"]

    def test_empty_body(self) -> None:
        assert split_elements("") == []

    def test_trailing_separator_yields_empty_element(self) -> None:
        assert split_elements("a,") == ["a", ""]

    def test_quoted_elements(self) -> None:
        assert split_elements("'x,y',z") == ["x,y", "z"]

    def test_escaped_quote_in_element(self) -> None:
        assert split_elements("'it\\'s'") == ["it's"]

    def test_unterminated_quote(self) -> None:
        with pytest.raises(GrammarError):
            split_elements("'bad")
