"""
Task store: the review console's only path to the backend.

The store owns no task state between calls. Every read re-derives truth from
the backend, and every write goes through `update`, which refuses to
overwrite a task that changed since it was loaded.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .backend import TaskBackend, TaskBackendError
from .filters import parse_filter
from .models import (
    ASSIGNEE_SIGIL,
    Task,
    TaskStatus,
    is_free_tag,
    parse_timestamp,
    utc_now,
)
from .sorting import SortMode, sort_tasks

logger = logging.getLogger(__name__)

COMPLETION_PERIOD = timedelta(weeks=1)


class TaskConsistencyError(TaskBackendError):
    """Raised when the backend holds zero or several records for one identity."""

    pass


class TaskConflictError(Exception):
    """
    Raised when a task changed in the backend after it was loaded.

    Recoverable: the pending edit is discarded and the caller re-reads
    the task.
    """

    def __init__(self, uuid: str, expected: str | None, actual: str | None):
        self.uuid = uuid
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Task {uuid} was modified externally ({expected!r} -> {actual!r}); "
            "refresh before updating"
        )


@dataclass
class Vocabulary:
    """Values observed on open tasks, in first-seen order."""

    projects: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


def _remember(values: list[str], value: str) -> None:
    if value and value not in values:
        values.append(value)


class TaskStore:
    """
    Guarded access to a task backend.

    Example:
        >>> store = TaskStore(TaskwarriorBackend())
        >>> tasks = store.fetch("project:home", SortMode.URGENCY)
        >>> edited = tasks[0].model_copy(update={"description": "New text"})
        >>> store.update(edited)
    """

    def __init__(
        self,
        backend: TaskBackend,
        completion_period: timedelta = COMPLETION_PERIOD,
    ):
        self.backend = backend
        self.completion_period = completion_period

    def fetch(
        self,
        expression: str,
        sort_mode: SortMode = SortMode.URGENCY,
        now: datetime | None = None,
    ) -> list[Task]:
        """
        Build a working set for a filter expression.

        Deleted tasks are always dropped. Without a completion token only
        open tasks are kept; with N tokens only tasks completed within N
        completion periods of `now` are kept.

        Args:
            expression: Filter expression (may contain completion tokens)
            sort_mode: Ordering for the returned list
            now: Reference time for the completion window

        Returns:
            Sorted working set
        """
        spec = parse_filter(expression)
        if now is None:
            now = utc_now()
        window = self.completion_period * spec.completed_periods

        working_set: list[Task] = []
        for task in self.backend.export(spec.args):
            if task.status == TaskStatus.DELETED:
                continue
            if not spec.wants_completed:
                if task.completed is None:
                    working_set.append(task)
                continue
            if task.completed is None:
                continue
            try:
                finished = parse_timestamp(task.completed)
            except ValueError as e:
                raise TaskConsistencyError(
                    f"Task {task.uuid} has an unreadable completion time {task.completed!r}"
                ) from e
            if now - finished < window:
                working_set.append(task)

        return sort_tasks(working_set, sort_mode)

    def get(self, uuid: str) -> Task:
        """
        Re-read the single backend record for an identity.

        Raises:
            TaskConsistencyError: If the backend does not hold exactly one record
        """
        tasks = self.backend.export([uuid])
        if len(tasks) != 1:
            raise TaskConsistencyError(f"Expected exactly one task for {uuid}, found {len(tasks)}")
        return tasks[0]

    def update(self, task: Task) -> None:
        """
        Write a task back, guarded against lost updates.

        For an existing task the current backend record is read first. If
        its last-modified stamp differs from the one captured when `task`
        was loaded, nothing is written. New tasks (no uuid) are imported
        directly.

        Raises:
            TaskConflictError: If the task changed in the backend since loading
            TaskConsistencyError: If several records share the task's identity
            TaskBackendError: If the backend read or write fails
        """
        if task.uuid:
            current = self.backend.export([task.uuid])
            if len(current) > 1:
                raise TaskConsistencyError(
                    f"Didn't expect to see more than 1 task with the same UUID: {task.uuid}"
                )
            if current and current[0].modified != task.modified:
                logger.debug(
                    "Refusing to import %s: modified %r -> %r",
                    task.uuid,
                    task.modified,
                    current[0].modified,
                )
                raise TaskConflictError(task.uuid, task.modified, current[0].modified)

        self.backend.import_task(task)

    def vocabulary(self) -> Vocabulary:
        """
        Collect projects, assignees and free tags from open tasks.

        Iterates in backend order so key assignment is reproducible for
        identical backend state.
        """
        vocab = Vocabulary()
        for task in self.backend.export([]):
            if task.completed is not None or task.status == TaskStatus.DELETED:
                continue
            if task.project:
                _remember(vocab.projects, task.project)
            for tag in task.tags:
                if is_free_tag(tag):
                    _remember(vocab.tags, tag)
                elif tag.startswith(ASSIGNEE_SIGIL):
                    _remember(vocab.assignees, tag[len(ASSIGNEE_SIGIL) :])
        return vocab
