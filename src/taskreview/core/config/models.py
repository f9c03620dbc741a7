"""
Configuration data models for taskreview.

These models define the structure of .taskreview.json and
~/.config/taskreview/config.json files, with validation and type safety via
Pydantic.
"""

import getpass
from datetime import timedelta
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskreview.core.tasks.models import COLOR_LABELS
from taskreview.core.tasks.sorting import SortMode


def default_reviewer_tag() -> str:
    """Reviewer tag for the current user (e.g. ``r:alice``)."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "reviewer"
    return f"r:{user}"


class ReviewConfig(BaseModel):
    """
    Settings for a review run.

    Every field can be set in a config file, most through TASKREVIEW_*
    environment variables, and the common ones through CLI options.
    """

    model_config = ConfigDict(extra="ignore")

    keys_path: Path = Field(
        default_factory=lambda: Path.home() / ".taskreview",
        description="Where learned key assignments are persisted",
    )
    reviewer_tag: str = Field(
        default_factory=default_reviewer_tag,
        min_length=1,
        description="Tag added to completed tasks when they are reviewed",
    )
    filter: str = Field(default="", description="Initial filter expression")
    review_window_hours: float = Field(
        default=24.0,
        gt=0,
        description="How long a review marker on an open task stays valid",
    )
    completion_period_days: int = Field(
        default=7,
        ge=1,
        description="History added by each completion token in a filter",
    )
    default_color: str = Field(
        default="green",
        description="Color label given by bulk fix and to new tasks",
    )
    list_limit: int = Field(default=30, ge=1, description="Rows shown in the listing")
    description_width: int = Field(
        default=60, ge=10, description="Description column width in summaries"
    )
    task_command: str = Field(default="task", min_length=1, description="Taskwarrior binary")
    sort_mode: SortMode = Field(default=SortMode.URGENCY, description="Initial sort order")

    @field_validator("default_color")
    @classmethod
    def validate_default_color(cls, v: str) -> str:
        """Only reserved color labels make sense as a default color."""
        if v not in COLOR_LABELS:
            raise ValueError(f"default_color must be one of {', '.join(COLOR_LABELS)}")
        return v

    @field_validator("keys_path", mode="before")
    @classmethod
    def expand_keys_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser()

    @property
    def review_window(self) -> timedelta:
        return timedelta(hours=self.review_window_hours)

    @property
    def completion_period(self) -> timedelta:
        return timedelta(days=self.completion_period_days)
