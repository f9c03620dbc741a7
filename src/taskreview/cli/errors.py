"""
Standardized error handling and exit codes for the taskreview CLI.

This module provides consistent error messaging with actionable guidance
and standardized exit codes.
"""

from enum import IntEnum

from rich.console import Console
from rich.markup import escape

from taskreview.core.tasks.backend import TaskBackendError
from taskreview.core.tasks.store import TaskConsistencyError
from taskreview.core.tasks.taskwarrior import TaskwarriorNotAvailableError

console = Console(stderr=True)

TASKWARRIOR_URL = "https://taskwarrior.org/download/"


class ExitCode(IntEnum):
    """Standard exit codes for taskreview."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Backend failure or inconsistent backend data."""

    USER_ERROR = 2
    """Configuration or input error (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
    doc_url: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it
        doc_url: Optional documentation URL for more help

    Example:
        >>> print_error(
        ...     "Taskwarrior command failed",
        ...     reason="task export exited with status 2",
        ...     solution="task diagnostics",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")

    if doc_url:
        console.print(f"[dim]Docs: {doc_url}[/dim]")


def print_missing_dependency_error(
    tool: str, install_url: str | None = None, install_cmd: str | None = None
) -> None:
    """Print error when a required tool is not installed."""
    print_error(
        f"Required tool not found: {tool}",
        reason=f"The '{tool}' command is required but not in PATH",
        solution=install_cmd,
        doc_url=install_url,
    )


def print_backend_error(error: TaskBackendError) -> None:
    """Print a fatal backend error with guidance matching its kind."""
    if isinstance(error, TaskwarriorNotAvailableError):
        print_missing_dependency_error(
            error.command,
            install_url=TASKWARRIOR_URL,
            install_cmd="apt install taskwarrior  # or brew install task",
        )
    elif isinstance(error, TaskConsistencyError):
        print_error(
            "Inconsistent task data",
            reason=str(error),
            solution="task diagnostics  # then check for duplicate UUIDs",
        )
    else:
        print_error(
            "Taskwarrior command failed",
            reason=str(error),
            solution="task diagnostics",
        )


def print_invalid_config_error(details: str) -> None:
    """Print error when the merged configuration does not validate."""
    print_error(
        "Invalid configuration",
        reason=details,
        solution="Check ~/.config/taskreview/config.json, .taskreview.json and TASKREVIEW_* vars",
    )
