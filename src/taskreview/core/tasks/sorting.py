"""
Sort engine for working sets.

One comparator per mode, selected by the review session. Sorting is stable,
so tasks with equal keys keep their relative order within a single call.
"""

from enum import Enum

from .models import Task


class SortMode(str, Enum):
    """Available orderings for a working set."""

    URGENCY = "urgency"
    RECENCY = "recency"
    COLOR = "color"

    @property
    def label(self) -> str:
        """Human-readable name shown above the listing."""
        return {
            SortMode.URGENCY: "Urgency",
            SortMode.RECENCY: "Date",
            SortMode.COLOR: "Color",
        }[self]


def sort_tasks(tasks: list[Task], mode: SortMode) -> list[Task]:
    """Return a new list of tasks ordered for `mode`."""
    return sorted(tasks, key=lambda task: task.sort_key(mode))


def sort_in_place(tasks: list[Task], mode: SortMode) -> None:
    """Re-sort an existing working set without re-fetching it."""
    tasks.sort(key=lambda task: task.sort_key(mode))
