"""
Task data models for taskreview.

Defines the Task model that mirrors one record of `task export`, plus the
reserved label vocabulary (colors, assignee sigil, dispute marker) and the
Taskwarrior timestamp helpers. Derived classifications are pure functions of
the label set and timestamps.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .sorting import SortMode

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"

COLOR_LABELS = ("red", "green", "blue")
COLOR_RANK = {"red": 0, "blue": 1, "green": 2}
NO_COLOR_RANK = 3

ASSIGNEE_SIGIL = "@"
DISPUTED_LABEL = "disputed"

REVIEW_WINDOW = timedelta(hours=24)

# Fields the backend computes; never sent back on import.
BACKEND_COMPUTED = {"short_id", "urgency"}


def parse_timestamp(value: str) -> datetime:
    """
    Parse a Taskwarrior timestamp (e.g. ``20240102T150405Z``).

    Raises:
        ValueError: If the value is not in Taskwarrior's compact UTC format
    """
    return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format an aware or naive-UTC datetime as a Taskwarrior timestamp."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(TIMESTAMP_FORMAT)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Task status values as reported by Taskwarrior.

    Review only ever writes pending, completed and deleted. Waiting and
    recurring show up in exports and are treated as open.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    DELETED = "deleted"
    WAITING = "waiting"
    RECURRING = "recurring"


class Task(BaseModel):
    """
    One Taskwarrior task as seen by the review console.

    Field aliases follow the `task export` wire names, so a record can be
    validated straight from JSON and dumped back for `task import`.
    Attributes the console does not model (due, annotations, UDAs) are kept
    as extras and round-trip untouched.

    Example:
        >>> task = Task.model_validate(
        ...     {"uuid": "a1b2", "description": "Ship it", "tags": ["red", "@alice"]}
        ... )
        >>> task.color_label()
        'red'
        >>> task.assignee
        'alice'
    """

    uuid: str | None = Field(default=None, description="Stable backend identity")
    short_id: int | None = Field(default=None, alias="id", description="Short display id")
    description: str = Field(default="", description="Free-text description")
    project: str | None = Field(default=None, description="Category label")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Lifecycle status")
    created: str | None = Field(default=None, alias="entry", description="Creation stamp")
    completed: str | None = Field(default=None, alias="end", description="Completion stamp")
    modified: str | None = Field(default=None, description="Last-modified stamp")
    reviewed: str | None = Field(default=None, description="Decaying review marker")
    urgency: float = Field(default=0.0, description="Backend-computed priority score")
    tags: list[str] = Field(default_factory=list, description="Unordered label set")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    # ------------------------------------------------------------------
    # Label vocabulary
    # ------------------------------------------------------------------

    def color_label(self) -> str | None:
        """Return the reserved color label present, if any."""
        for tag in self.tags:
            if tag in COLOR_LABELS:
                return tag
        return None

    def assignee_label(self) -> str | None:
        """Return the sigil-prefixed assignee label present, if any."""
        for tag in self.tags:
            if tag.startswith(ASSIGNEE_SIGIL):
                return tag
        return None

    @property
    def assignee(self) -> str | None:
        label = self.assignee_label()
        return label[len(ASSIGNEE_SIGIL) :] if label else None

    def is_disputed(self) -> bool:
        return DISPUTED_LABEL in self.tags

    def free_tags(self) -> list[str]:
        """Tags with no reserved meaning (what the tag picker offers)."""
        return [tag for tag in self.tags if is_free_tag(tag)]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.completed is None

    def is_reviewed(
        self,
        reviewer_tag: str,
        now: datetime | None = None,
        window: timedelta = REVIEW_WINDOW,
    ) -> bool:
        """
        Check whether the task counts as reviewed.

        Open tasks carry a timestamp marker that decays after `window`.
        Completed tasks carry a per-reviewer tag and never decay.

        Args:
            reviewer_tag: Tag identifying this reviewer on completed tasks
            now: Reference time (defaults to the current UTC time)
            window: How long a review marker stays valid

        Returns:
            True if the task is reviewed as of `now`
        """
        if not self.is_open:
            return reviewer_tag in self.tags
        if not self.reviewed:
            return False
        try:
            marker = parse_timestamp(self.reviewed)
        except ValueError:
            return False
        if now is None:
            now = utc_now()
        return now - marker < window

    def sort_time(self) -> datetime | None:
        """Completion time if completed, else creation time."""
        stamp = self.completed or self.created
        if not stamp:
            return None
        try:
            return parse_timestamp(stamp)
        except ValueError:
            return None

    def sort_key(self, mode: SortMode) -> float:
        """
        Ascending sort key for the given mode.

        Urgency and recency sort descending, so their keys are negated.
        Color ranks red < blue < green < uncolored.
        """
        from .sorting import SortMode

        if mode == SortMode.URGENCY:
            return -self.urgency
        if mode == SortMode.RECENCY:
            when = self.sort_time()
            # Undated tasks sort after everything else.
            return -when.timestamp() if when else float("inf")
        if mode == SortMode.COLOR:
            color = self.color_label()
            return float(COLOR_RANK[color]) if color else float(NO_COLOR_RANK)
        raise ValueError(f"Unhandled sort mode: {mode}")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_import_payload(self) -> dict[str, Any]:
        """
        Build the record sent to `task import`.

        Absent optional fields are omitted rather than sent as null, and
        backend-computed fields are dropped.
        """
        payload = self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude=BACKEND_COMPUTED,
        )
        if not payload.get("tags"):
            payload.pop("tags", None)
        return payload


def is_free_tag(tag: str) -> bool:
    """
    Check whether a tag is free-form.

    Colors, assignee labels, negations and Taskwarrior's uppercase virtual
    tags are reserved.
    """
    if not tag:
        return False
    if tag[0].isupper():
        return False
    if tag[0] in (ASSIGNEE_SIGIL, "-"):
        return False
    return tag not in COLOR_LABELS
