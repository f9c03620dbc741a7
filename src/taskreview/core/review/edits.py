"""
Task edit operations.

Each function returns a modified deep copy of the task and leaves the input
untouched. Color and assignee edits strip every prior label of their category
before adding the new one, so a task never carries two of either.
"""

from datetime import datetime

from taskreview.core.tasks.models import (
    ASSIGNEE_SIGIL,
    COLOR_LABELS,
    DISPUTED_LABEL,
    Task,
    TaskStatus,
    format_timestamp,
    utc_now,
)


def _copy(task: Task) -> Task:
    return task.model_copy(deep=True)


def set_description(task: Task, description: str) -> Task:
    edited = _copy(task)
    edited.description = description.strip()
    return edited


def set_assignee(task: Task, name: str) -> Task:
    """
    Replace the assignee label.

    Example:
        >>> set_assignee(Task(tags=["@alice", "home"]), "bob").tags
        ['home', '@bob']
    """
    if name.startswith(ASSIGNEE_SIGIL):
        name = name[len(ASSIGNEE_SIGIL) :]
    edited = _copy(task)
    edited.tags = [tag for tag in edited.tags if not tag.startswith(ASSIGNEE_SIGIL)]
    edited.tags.append(f"{ASSIGNEE_SIGIL}{name}")
    return edited


def set_project(task: Task, project: str) -> Task:
    edited = _copy(task)
    edited.project = project
    return edited


def set_color(task: Task, color: str) -> Task:
    """Replace the color label; `color` must be a reserved color."""
    if color not in COLOR_LABELS:
        raise ValueError(f"Not a color label: {color!r}")
    edited = _copy(task)
    edited.tags = [tag for tag in edited.tags if tag not in COLOR_LABELS]
    edited.tags.append(color)
    return edited


def toggle_tag(task: Task, tag: str) -> Task:
    """Remove `tag` if present, otherwise add it."""
    edited = _copy(task)
    if tag in edited.tags:
        edited.tags = [t for t in edited.tags if t != tag]
    else:
        edited.tags.append(tag)
    return edited


def mark_reviewed(task: Task, reviewer_tag: str, now: datetime | None = None) -> Task:
    """
    Mark a task reviewed as of `now`.

    Open tasks get a fresh timestamp marker. Completed tasks get the
    reviewer tag instead, once.
    """
    edited = _copy(task)
    if edited.is_open:
        edited.reviewed = format_timestamp(now or utc_now())
    elif reviewer_tag not in edited.tags:
        edited.tags.append(reviewer_tag)
    return edited


def mark_done(task: Task) -> Task:
    edited = _copy(task)
    edited.status = TaskStatus.COMPLETED
    return edited


def mark_deleted(task: Task) -> Task:
    edited = _copy(task)
    edited.status = TaskStatus.DELETED
    return edited


def mark_disputed(task: Task) -> Task:
    edited = _copy(task)
    if DISPUTED_LABEL not in edited.tags:
        edited.tags.append(DISPUTED_LABEL)
    return edited
