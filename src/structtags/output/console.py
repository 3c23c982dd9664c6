"""Rich Console factory and theme.

Consoles render into a StringIO buffer so renderers keep a ``-> str``
contract; Rich drops color codes when not attached to a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

STRUCTTAGS_THEME = Theme(
    {
        "st.ok": "bold green",
        "st.error": "bold red",
        "st.op": "bold cyan",
        "st.key": "bold blue",
        "st.value": "default",
        "st.dim": "dim",
        "st.required": "bold yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=STRUCTTAGS_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
