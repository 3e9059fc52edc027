"""Shared utility functions for the Metro scaffolding engine.

Provides synchronous process execution with inherited standard streams,
JSON formatting, and Rich-based console reporting. All user-facing output of
the engine goes through the module-level ``console``.
"""

from __future__ import annotations

import json
import shlex
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from src.commands.dispatcher import Command

console = Console()

# ---------------------------------------------------------------------------
# Process execution
# ---------------------------------------------------------------------------


def run_process(
    command: str | list[str],
    cwd: str | Path | None = None,
) -> int:
    """Run a program with the parent's stdin, stdout and stderr.

    The call blocks until the child exits; there is no timeout.

    Args:
        command: Command string (split with shell quoting rules) or an
            argument list.
        cwd: Working directory for the child process.

    Returns:
        The child's exit code. A program that cannot be found yields 127.
    """
    argv = shlex.split(command) if isinstance(command, str) else list(command)
    if not argv:
        raise ValueError("Cannot run an empty command")

    try:
        completed = subprocess.run(argv, cwd=str(cwd) if cwd else None)
        returncode = completed.returncode
    except FileNotFoundError:
        print_error(f"Command not found: {argv[0]}")
        returncode = 127

    if returncode != 0:
        print_error(f"Error: {returncode}")

    return returncode


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------


def dump_json(data: dict[str, Any] | list[Any]) -> str:
    """Serialise ``data`` with stable two-space indentation and a final newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]", highlight=False)


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]", highlight=False)


def print_info(message: str) -> None:
    """Print a plain, unstyled message (menus, usage text)."""
    console.print(message, markup=False, highlight=False)


def print_command_table(commands: list[Command], title: str = "Commands") -> None:
    """Print the dispatch table as ``category:name`` rows.

    Args:
        commands: Commands in display order.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Command", style="green", no_wrap=True)
    table.add_column("Description")

    for command in commands:
        table.add_row(command.key, command.description)

    console.print(table)
