"""
Console output utilities for tagwatch using Rich.

User-facing status lines (``[OK]``, ``[ERROR]``) and the ``describe``
table go through here. Diagnostics go through :mod:`tagwatch.utils.logger`.
Status lines are written to stderr so that machine-readable output on
stdout (``describe --format env``) stays clean.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Mapping, Optional

from rich.text import Text
from rich.table import Table
from rich.theme import Theme
from rich.console import Console

TAGWATCH_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
    }
)

_console: Optional[Console] = None
_out_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color(stream) -> bool:
    """Return True if colored output should be enabled for ``stream``."""
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return stream.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return the stderr console used for status messages."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color(sys.stderr)
                _console = Console(
                    theme=TAGWATCH_THEME,
                    stderr=True,
                    no_color=not use_color,
                    highlight=False,
                )
    return _console


def get_raw_console() -> Console:
    """Return the stdout console used for command results."""
    global _out_console

    if _out_console is None:
        with _console_lock:
            if _out_console is None:
                use_color = _should_use_color(sys.stdout)
                _out_console = Console(
                    theme=TAGWATCH_THEME,
                    no_color=not use_color,
                    highlight=False,
                )
    return _out_console


def reconfigure_console() -> None:
    """Drop cached consoles so environment changes (``NO_COLOR``) apply."""
    global _console, _out_console
    with _console_lock:
        _console = None
        _out_console = None


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message."""
    _get_console().print(
        f"{prefix} {message}", style="success", markup=False, soft_wrap=True
    )


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message."""
    _get_console().print(
        f"{prefix} {message}", style="error", markup=False, soft_wrap=True
    )


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message."""
    _get_console().print(
        f"{prefix} {message}", style="warning", markup=False, soft_wrap=True
    )


def print_fields_table(
    values: Mapping[str, str],
    *,
    title: Optional[str] = None,
) -> None:
    """Render formatted version fields as a two-column table."""
    table = Table(
        title=Text(title) if title else None,
        show_header=True,
        header_style="bold",
    )
    table.add_column("Field", style="info", no_wrap=True)
    table.add_column("Value", overflow="fold")

    for name, value in values.items():
        table.add_row(name, Text(value) if value else Text("<empty>", style="dim"))

    get_raw_console().print(table)
