"""Rich Console factory and theme for prodtimer output.

Consoles render to a StringIO buffer so renderers keep the
``format_result() -> str`` contract. In non-TTY environments (tests, pipes)
Rich disables color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

TIMER_THEME = Theme(
    {
        "pt.ok": "bold green",
        "pt.error": "bold red",
        "pt.warning": "bold yellow",
        "pt.op": "bold cyan",
        "pt.key": "dim",
        "pt.name": "bold blue",
        "pt.time": "magenta",
        "pt.state.CREATED": "dim",
        "pt.state.RUNNING": "bold green",
        "pt.state.PAUSED": "yellow",
        "pt.state.ENDED": "cyan",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=TIMER_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 100,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_state(state: str) -> str:
    """Return the Rich style name for a timer state."""
    return f"pt.state.{state}" if state else ""
