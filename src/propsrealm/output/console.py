"""Rich theme and buffer-backed consoles for CLI output.

Renderers draw into a Console whose file is a StringIO, and the CLI echoes
the captured text. Rich drops ANSI codes on its own when stdout is not a
terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

REALM_THEME = Theme(
    {
        "realm.ok": "bold green",
        "realm.error": "bold red",
        "realm.warning": "bold yellow",
        "realm.op": "bold cyan",
        "realm.key": "dim",
        "realm.principal": "bold blue",
        "realm.name": "bold magenta",
        "realm.yes": "green",
        "realm.no": "red",
        "realm.role.added": "green",
        "realm.role.removed": "red strike",
    }
)

DEFAULT_WIDTH = 120


def create_console(*, no_color: bool = False, width: int = DEFAULT_WIDTH) -> Console:
    """A themed Console writing into a fresh StringIO."""
    return Console(file=StringIO(), theme=REALM_THEME, no_color=no_color, highlight=False, width=width)


def get_output(console: Console) -> str:
    buffer = console.file
    assert isinstance(buffer, StringIO)
    return buffer.getvalue()


def style_for_flag(value: object) -> str:
    """Green for True and ``"supported"``, red for False and ``"unsupported"``."""
    if value is True or value == "supported":
        return "realm.yes"
    if value is False or value == "unsupported":
        return "realm.no"
    return ""
