"""Console output for the command line, rendered with Rich.

Library modules log; only the CLI talks to the user through these helpers.
Text passed in is plain, any Rich markup in it is escaped.
"""

from enum import Enum
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape as escape_rich_markup
from rich.table import Table


class MessageLevel(str, Enum):
    """Severity level for text messages."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


LEVEL_STYLES = {
    MessageLevel.INFO: "",
    MessageLevel.WARNING: "yellow",
    MessageLevel.ERROR: "bold red",
    MessageLevel.SUCCESS: "green",
}

_console: Optional[Console] = None


def get_console() -> Console:
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Optional[Console]) -> None:
    """Replace the console (tests capture output this way)."""
    global _console
    _console = console


def emit_message(level: MessageLevel, text: str) -> None:
    style = LEVEL_STYLES[level]
    body = escape_rich_markup(text)
    get_console().print(f"[{style}]{body}[/{style}]" if style else body)


def emit_info(text: str) -> None:
    emit_message(MessageLevel.INFO, text)


def emit_success(text: str) -> None:
    emit_message(MessageLevel.SUCCESS, text)


def emit_warning(text: str) -> None:
    emit_message(MessageLevel.WARNING, text)


def emit_error(text: str) -> None:
    emit_message(MessageLevel.ERROR, text)


def emit_table(title: str, columns: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    table = Table(title=title, show_lines=False)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*(escape_rich_markup(str(cell)) for cell in row))
    get_console().print(table)
