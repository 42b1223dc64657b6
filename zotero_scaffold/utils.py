"""Shared utility functions for the scaffolder.

Provides JSON I/O, path-safety checks, Rich-based console reporting and
logging setup.  Console helpers are for user-facing status only; library
modules log diagnostics through the standard ``logging`` tree, rendered by a
``RichHandler`` once ``setup_logging`` has run.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path, PurePosixPath
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def setup_logging(verbose: bool = False) -> None:
    """Route the ``zotero_scaffold`` logger tree through a Rich handler.

    Args:
        verbose: Emit DEBUG records when ``True``; otherwise only WARNING
            and above.
    """
    logger = logging.getLogger("zotero_scaffold")
    logger.handlers.clear()
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def check_relative_path(value: str) -> str:
    """Validate a forward-slash relative path and return it unchanged.

    Rejects empty paths, absolute paths, backslashes, and ``.``, ``..`` or
    empty segments, so the path can never escape the directory it is joined
    onto.

    Raises:
        ValueError: If *value* is not a safe relative path.
    """
    if not value:
        raise ValueError("path must not be empty")
    if "\\" in value:
        raise ValueError(f"path must use forward slashes: {value!r}")
    if value.startswith("/"):
        raise ValueError(f"path must be relative: {value!r}")
    for segment in value.split("/"):
        if segment in ("", ".", ".."):
            raise ValueError(f"path contains an invalid segment: {value!r}")
    return value


def to_posix_relative(path: Path, root: Path) -> str:
    """Return *path* relative to *root* with forward slashes on every host."""
    return PurePosixPath(*path.relative_to(root).parts).as_posix()


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    return json.loads(raw)


def dump_json(data: Any, path: str | Path) -> Path:
    """Write *data* as pretty-printed JSON with a trailing newline.

    The output is encoded as UTF-8 bytes so line endings are identical on
    every host.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    file_path.write_bytes(content.encode("utf-8"))
    return file_path


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_info(message: str) -> None:
    """Print a cyan status message."""
    console.print(f"[cyan]{escape(message)}[/cyan]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message to stderr."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning message to stderr."""
    err_console.print(f"[bold yellow]{escape(message)}[/bold yellow]", highlight=False)


def print_table(
    rows: list[list[str]],
    columns: list[str],
    title: str = "",
    *,
    stderr: bool = False,
) -> None:
    """Print *rows* as a Rich table with the given column headers."""
    table = Table(title=title or None, show_header=True, header_style="bold cyan")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    (err_console if stderr else console).print(table)
