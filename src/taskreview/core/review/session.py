"""
Review session context.

Holds the settings that change while reviewing (sort mode, show-all) next to
the fixed ones taken from configuration. Passed explicitly to the machine and
the shell instead of living in module globals.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from taskreview.core.tasks.models import REVIEW_WINDOW, Task, utc_now
from taskreview.core.tasks.sorting import SortMode

if TYPE_CHECKING:
    from taskreview.core.config.models import ReviewConfig


@dataclass
class ReviewSession:
    """
    Mutable state of one interactive run.

    Attributes:
        reviewer_tag: Tag added to completed tasks when reviewed
        sort_mode: Current listing order
        show_all: Whether already-reviewed tasks are listed
        review_window: Validity of a review marker on open tasks
        default_color: Color label used by bulk fix and new tasks
        list_limit: Maximum rows in the listing
        description_width: Description column width in summaries
        clock: Source of the current time (UTC)
    """

    reviewer_tag: str
    sort_mode: SortMode = SortMode.URGENCY
    show_all: bool = False
    review_window: timedelta = REVIEW_WINDOW
    default_color: str = "green"
    list_limit: int = 30
    description_width: int = 60
    clock: Callable[[], datetime] = field(default=utc_now, repr=False)

    @classmethod
    def from_config(cls, config: ReviewConfig) -> ReviewSession:
        return cls(
            reviewer_tag=config.reviewer_tag,
            sort_mode=config.sort_mode,
            review_window=config.review_window,
            default_color=config.default_color,
            list_limit=config.list_limit,
            description_width=config.description_width,
        )

    def now(self) -> datetime:
        return self.clock()

    def is_reviewed(self, task: Task) -> bool:
        return task.is_reviewed(self.reviewer_tag, now=self.now(), window=self.review_window)

    def visible(self, tasks: list[Task]) -> list[Task]:
        """Tasks the listing shows: all of them, or only unreviewed ones."""
        if self.show_all:
            return list(tasks)
        return [task for task in tasks if not self.is_reviewed(task)]
