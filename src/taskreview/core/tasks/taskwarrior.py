"""
Taskwarrior task backend implementation.

This backend wraps the Taskwarrior CLI (`task`). Reads go through
`task <filter> export`, which prints a JSON array; writes go through
`task import`, which reads one JSON record from stdin.
"""

import json
import logging
import shutil
import subprocess
from typing import Any

from pydantic import ValidationError

from .backend import TaskBackendError, register_backend
from .models import Task

logger = logging.getLogger(__name__)

# Keep Taskwarrior from prompting or decorating output.
RC_OVERRIDES = ["rc.confirmation=off", "rc.verbose=nothing"]


class TaskwarriorNotAvailableError(TaskBackendError):
    """Raised when the Taskwarrior CLI is not installed or not on PATH."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(
            f"Taskwarrior CLI ({command}) is not installed. "
            "Install with: apt install taskwarrior OR brew install task"
        )


class TaskwarriorCommandError(TaskBackendError):
    """Raised when a Taskwarrior command fails or returns malformed output."""

    pass


@register_backend("taskwarrior")
class TaskwarriorBackend:
    """
    Task backend that uses the Taskwarrior CLI.

    Example:
        >>> backend = TaskwarriorBackend()
        >>> tasks = backend.export(["project:home"])
        >>> backend.import_task(tasks[0])
    """

    def __init__(self, task_command: str = "task"):
        """
        Initialize the Taskwarrior backend.

        Args:
            task_command: Name or path of the Taskwarrior binary

        Raises:
            TaskwarriorNotAvailableError: If the binary cannot be found
        """
        self.task_command = task_command

        if shutil.which(task_command) is None:
            raise TaskwarriorNotAvailableError(task_command)

    def _run_task(self, args: list[str], stdin: str | None = None) -> str:
        """
        Run a Taskwarrior command and return its stdout.

        Args:
            args: Command arguments (e.g., ["project:home", "export"])
            stdin: Optional text piped to the command

        Returns:
            Captured standard output

        Raises:
            TaskwarriorCommandError: If the command exits non-zero
        """
        cmd = [self.task_command, *RC_OVERRIDES, *args]
        logger.debug("Running %s", " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else str(e)
            raise TaskwarriorCommandError(
                f"task command failed: {' '.join(cmd)}\nError: {error_msg}"
            ) from e
        except OSError as e:
            raise TaskwarriorCommandError(f"Could not run {' '.join(cmd)}: {e}") from e

        return result.stdout or ""

    def _parse_export(self, output: str) -> list[dict[str, Any]]:
        """Decode `task export` output into raw records."""
        if not output.strip():
            return []
        try:
            parsed = json.loads(output)
        except json.JSONDecodeError as e:
            raise TaskwarriorCommandError(
                f"Failed to parse task output as JSON: {e}\nOutput: {output[:200]}"
            ) from e
        if not isinstance(parsed, list):
            raise TaskwarriorCommandError(
                f"Expected a JSON array from task export, got {type(parsed).__name__}"
            )
        return parsed

    def export(self, filter_args: list[str]) -> list[Task]:
        """
        Export tasks matching a filter.

        Args:
            filter_args: Taskwarrior filter tokens (empty for all tasks)

        Returns:
            Parsed tasks in Taskwarrior's order

        Raises:
            TaskwarriorCommandError: If the command fails or a record is invalid
        """
        output = self._run_task([*filter_args, "export"])
        tasks: list[Task] = []
        for raw in self._parse_export(output):
            try:
                tasks.append(Task.model_validate(raw))
            except ValidationError as e:
                raise TaskwarriorCommandError(f"Malformed task record from export: {e}") from e
        logger.debug("Exported %d tasks for filter %r", len(tasks), filter_args)
        return tasks

    def import_task(self, task: Task) -> None:
        """
        Write one task through `task import`.

        Args:
            task: Task to import (a missing uuid creates a new task)

        Raises:
            TaskwarriorCommandError: If the import fails
        """
        body = json.dumps(task.to_import_payload())
        self._run_task(["import"], stdin=body)
        logger.debug("Imported task %s", task.uuid or "<new>")

    @property
    def backend_name(self) -> str:
        """Get the name of this backend."""
        return "taskwarrior"
