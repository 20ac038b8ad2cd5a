"""Rich Console factory and theme for modman output.

Consoles render into a StringIO buffer so renderers keep a plain
``-> str`` contract.  Outside a terminal (tests, pipes) Rich drops color.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

MODMAN_THEME = Theme(
    {
        "mm.ok": "bold green",
        "mm.error": "bold red",
        "mm.warning": "bold yellow",
        "mm.op": "bold cyan",
        "mm.key": "dim",
        "mm.module": "bold blue",
        "mm.path": "dim",
        "mm.outcome.created": "green",
        "mm.outcome.removed": "green",
        "mm.outcome.skipped_already_correct": "dim",
        "mm.outcome.failed": "bold red",
        "mm.outcome.rolled_back": "yellow",
        "mm.outcome.not_attempted": "dim",
        "mm.health.installed": "green",
        "mm.health.installable": "cyan",
        "mm.health.conflict": "yellow",
        "mm.health.broken": "red",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width (keeps test output stable).
    """
    return Console(
        file=StringIO(),
        theme=MODMAN_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_outcome(kind: str) -> str:
    return f"mm.outcome.{kind}" if kind else ""


def style_for_health(status: str) -> str:
    return f"mm.health.{status}" if status else ""
