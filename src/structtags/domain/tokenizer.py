"""Tag grammar scanner.

Grammar::

    tag        := entry (',' entry)*
    entry      := [ key '=' ] value
    key        := one-or-more word characters
    value      := quoted | bracketed | bare
    quoted     := "'" ( any-char-except-unescaped-quote | "\\'" )* "'"
    bracketed  := '[' ( any-char-except-unescaped-bracket | '\\]' )* ']'
    bare       := any characters up to next ','

Every scanner is a pure function taking ``(raw, pos)`` and returning
``(next_pos, value)``. An unterminated quote or bracket rejects the whole
tag string.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from structtags.domain.errors import GrammarError

QUOTE = "'"
OPEN_BRACKET = "["
CLOSE_BRACKET = "]"
SEPARATOR = ","
ESCAPE = "\\"

_KEY_RE = re.compile(r"(\w+)=", re.ASCII)


@dataclass(frozen=True)
class Token:
    """One ``key=value`` entry of a tag string.

    ``key`` is None when the entry had no explicit ``key=`` prefix; the
    decoder infers the effective key from context.
    """

    key: str | None
    value: str
    position: int


def _scan_delimited(raw: str, pos: int, close: str, what: str) -> tuple[int, str]:
    """Scan from the opening delimiter at *pos* through its matching *close*."""
    parts: list[str] = []
    start = pos + 1
    while True:
        end = raw.find(close, start)
        if end == -1:
            raise GrammarError(f"missing closing {what}", raw=raw, position=pos)
        chunk = raw[start:end]
        if chunk.endswith(ESCAPE):
            parts.append(chunk[:-1] + close)
            start = end + 1
            continue
        parts.append(chunk)
        return end + 1, "".join(parts)


def scan_quoted(raw: str, pos: int) -> tuple[int, str]:
    """Scan a ``'...'`` value starting at the quote at *pos*."""
    return _scan_delimited(raw, pos, QUOTE, "quote")


def scan_bracketed(raw: str, pos: int) -> tuple[int, str]:
    """Scan a ``[...]`` value starting at the bracket at *pos*."""
    return _scan_delimited(raw, pos, CLOSE_BRACKET, "bracket")


def scan_bare(raw: str, pos: int) -> tuple[int, str]:
    """Scan a bare value up to (not including) the next separator."""
    end = raw.find(SEPARATOR, pos)
    if end == -1:
        end = len(raw)
    return end, raw[pos:end]


def _expect_separator(raw: str, pos: int) -> int:
    if pos < len(raw) and raw[pos] != SEPARATOR:
        raise GrammarError("unexpected character after closing delimiter", raw=raw, position=pos)
    return pos


def _scan_value(raw: str, pos: int) -> tuple[int, str]:
    lead = raw[pos : pos + 1]
    if lead == QUOTE:
        end, value = scan_quoted(raw, pos)
        return _expect_separator(raw, end), value
    if lead == OPEN_BRACKET:
        end, value = scan_bracketed(raw, pos)
        return _expect_separator(raw, end), value
    return scan_bare(raw, pos)


def iter_tokens(raw: str) -> Iterator[Token]:
    """Yield tokens lazily. A trailing separator does not add an empty entry."""
    pos = 0
    length = len(raw)
    while pos < length:
        start = pos
        key: str | None = None
        match = _KEY_RE.match(raw, pos)
        if match is not None:
            key = match.group(1)
            pos = match.end()
        pos, value = _scan_value(raw, pos)
        yield Token(key=key, value=value, position=start)
        if pos < length:
            pos += 1


def tokenize(raw: str) -> list[Token]:
    """Tokenize a whole tag string.

    Raises:
        GrammarError: On an unterminated quote or bracket anywhere in *raw*.
    """
    return list(iter_tokens(raw))


def split_elements(body: str) -> list[str]:
    """Split the contents of a bracketed list into its elements.

    Elements follow the same quoting rule as tag values. Unlike a tag
    string, a trailing separator yields a final empty element, and an empty
    body is an empty list.
    """
    if not body:
        return []
    elements: list[str] = []
    pos = 0
    while True:
        if body[pos : pos + 1] == QUOTE:
            pos, value = scan_quoted(body, pos)
            pos = _expect_separator(body, pos)
        else:
            pos, value = scan_bare(body, pos)
        elements.append(value)
        if pos >= len(body):
            return elements
        pos += 1
