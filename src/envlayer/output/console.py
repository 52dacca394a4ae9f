"""Rich Console factory and theme for envlayer output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ENVLAYER_THEME = Theme(
    {
        "env.ok": "bold green",
        "env.error": "bold red",
        "env.warning": "bold yellow",
        "env.op": "bold cyan",
        "env.key": "dim",
        "env.path": "dim",
        "env.masked": "magenta",
        "env.layer.defaults": "dim",
        "env.layer.structural": "blue",
        "env.layer.secrets": "magenta",
        "env.layer.environment": "yellow",
    }
)

_LAYER_STYLES: dict[str, str] = {
    "defaults": "env.layer.defaults",
    "structural": "env.layer.structural",
    "secrets": "env.layer.secrets",
    "environment": "env.layer.environment",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=ENVLAYER_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_layer(layer: str) -> str:
    """Return the Rich style name for a layer name."""
    return _LAYER_STYLES.get(layer, "")
