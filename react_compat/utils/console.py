"""
Terminal output for react-compat-check.

Everything the user reads on stdout goes through one themed Rich console:
status lines, the compatibility and upgrade tables, and the yes/no
confirmation. Diagnostics belong in :mod:`react_compat.utils.logger`.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

REACT_COMPAT_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
    }
)

_STATUS_LABELS: Dict[str, str] = {
    "compatible": "[green]✓ compatible[/green]",
    "incompatible": "[red]✗ incompatible[/red]",
    "unknown": "[yellow]? unknown[/yellow]",
}

_UPDATE_TYPE_COLORS: Dict[str, str] = {
    "major": "red",
    "minor": "yellow",
    "patch": "green",
    "update": "yellow",
    "downgrade": "red",
    "new": "cyan",
}

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Color only on an interactive stdout, never under NO_COLOR or CI."""
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                color = _should_use_color()
                _console = Console(theme=REACT_COMPAT_THEME, no_color=not color, highlight=color)
    return _console


def reconfigure_console() -> None:
    """Drop the cached console so the next print re-reads the environment.

    The CLI calls this after ``--no-color`` has set ``NO_COLOR``.
    """
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the shared console for free-form Rich markup."""
    return _get_console()


# ---------------------------------------------------------------------------
# Status lines
# ---------------------------------------------------------------------------


def _status(style: str, prefix: str, message: str) -> None:
    _get_console().print(f"{prefix} {message}", style=style)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _status("success", prefix, message)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _status("error", prefix, message)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _status("warning", prefix, message)


def print_info(message: str, *, prefix: str = "[INFO]") -> None:
    _status("info", prefix, message)


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def print_table(
    rows: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Render ``rows`` as a table; nothing is printed for an empty list.

    Args:
        rows: One dict per row, keyed by column header. Values may contain
            Rich markup.
        headers: Columns to show, in order. Defaults to the first row's keys.
        title: Caption printed above the table.
        column_styles: Per-header keyword arguments for ``Table.add_column``
            (``style``, ``justify``, ``no_wrap``).
    """
    if not rows:
        return

    columns = headers or list(rows[0])
    styles = column_styles or {}

    table = Table(title=title, header_style="bold")
    for column in columns:
        options = styles.get(column, {})
        table.add_column(
            column,
            style=options.get("style"),
            justify=options.get("justify", "default"),
            no_wrap=options.get("no_wrap", False),
            overflow="fold",
        )
    for row in rows:
        table.add_row(*(str(row.get(column, "")) for column in columns))

    _get_console().print(table)


# ---------------------------------------------------------------------------
# Confirmation
# ---------------------------------------------------------------------------


def confirm(message: str, *, default: bool = False) -> bool:
    """Ask a yes/no question on stdin.

    ``y``/``yes`` and ``n``/``no`` answer it; anything else, including an
    empty line, takes ``default``. End of input or Ctrl+C declines.
    """
    console = _get_console()
    console.print(f"{message} {'[Y/n]' if default else '[y/N]'}: ", end="", style="info", markup=False)

    try:
        answer = input().strip().lower()
    except (EOFError, KeyboardInterrupt):
        console.print()
        return False

    if answer in ("y", "yes"):
        return True
    if answer in ("n", "no"):
        return False
    return default


# ---------------------------------------------------------------------------
# Markup helpers
# ---------------------------------------------------------------------------


def colorize_update_type(update_type: str) -> str:
    """Wrap a :func:`~react_compat.utils.version_utils.get_update_type`
    label in its color; unknown labels are returned as-is."""
    color = _UPDATE_TYPE_COLORS.get(update_type.lower())
    return f"[{color}]{update_type}[/{color}]" if color else update_type


def colorize_status(status: str) -> str:
    """Return the table label for a compatibility status value."""
    return _STATUS_LABELS.get(status.lower(), status)
