"""Operation-specific Rich renderers for OpResult.

Dispatched by ``result.op``; unknown ops fall back to key-value output.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from structtags.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from structtags.services.result import OpResult


def render_result(result: OpResult, *, verbose: bool = False) -> str:
    """Render an OpResult to a string (plain text outside a terminal)."""
    console = create_console()
    if result.ok:
        _status_line(console, result)
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def _status_line(console: Console, result: OpResult) -> None:
    console.print(Text("OK", style="st.ok"), Text(f"  {result.op}", style="st.op"))


def _compact(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def _render_tokens(result: OpResult, console: Console) -> None:
    table = Table(show_edge=False, header_style="st.dim")
    table.add_column("#", justify="right")
    table.add_column("key", style="st.key")
    table.add_column("value")
    table.add_column("pos", justify="right", style="st.dim")
    for index, token in enumerate(result.data.get("tokens", [])):
        key = token["key"] if token["key"] is not None else "-"
        table.add_row(str(index), Text(key), Text(repr(token["value"])), str(token["position"]))
    console.print(table)


def _render_plan(result: OpResult, console: Console) -> None:
    data = result.data
    console.print(Text(f"  shape: {data.get('shape')}  has_name: {data.get('has_name')}"))
    table = Table(show_edge=False, header_style="st.dim")
    table.add_column("key", style="st.key")
    table.add_column("field")
    table.add_column("required", style="st.required")
    table.add_column("resolver", style="st.dim")
    for option in data.get("options", []):
        table.add_row(
            Text(option["key"]),
            Text(option["field"]),
            "yes" if option["required"] else "",
            Text(option["resolver"]),
        )
    console.print(table)


def _render_decode(result: OpResult, console: Console) -> None:
    data = result.data
    console.print(Text(f"  {data.get('subject')} [{data.get('tag_name')}]", style="st.dim"))
    table = Table(show_edge=False, header_style="st.dim")
    table.add_column("#", justify="right")
    table.add_column("field", style="st.key")
    table.add_column("options")
    for record in data.get("fields", []):
        table.add_row(
            str(record["field_index"]), Text(record["field_name"]), Text(_compact(record["value"]))
        )
    console.print(table)


def _render_generic(result: OpResult, console: Console) -> None:
    for key, value in result.data.items():
        console.print(Text(f"  {key}: ", style="st.dim"), Text(_compact(value)))


def _render_error(result: OpResult, console: Console, *, verbose: bool) -> None:
    message = result.error.message if result.error else "Unknown error"
    code = result.error.code if result.error else "ERROR"
    console.print(Text("ERROR", style="st.error"), Text(f"  {result.op} [{code}]: {message}"))
    if verbose and result.error and result.error.detail:
        for key, value in result.error.detail.items():
            console.print(Text(f"  {key}: ", style="st.dim"), Text(_compact(value)))


_OP_RENDERERS: dict[str, Callable[[OpResult, Console], None]] = {
    "tokenize": _render_tokens,
    "plan": _render_plan,
    "decode": _render_decode,
}
