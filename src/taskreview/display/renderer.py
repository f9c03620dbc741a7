"""
Rich-based renderer for the review console.

Draws one-line task summaries, the detail view, key help lines and the
conflict notice. Holds no state beyond the console and the review session it
reads display settings from.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from taskreview.core.review.session import ReviewSession
from taskreview.core.tasks.models import Task, TaskStatus, parse_timestamp
from taskreview.core.tasks.store import TaskConflictError

DATE_FORMAT = "%Y %b %d %a"

COLOR_STYLES = {
    "green": "black on green",
    "red": "white on red",
    "blue": "white on blue",
}
UNCOLORED_STYLE = "white on black"

STATUS_BADGES = {
    "X": "white on red",
    "D": "white on red",
    "R": "black on green",
    "N": "white on blue",
}


def format_age(duration: timedelta) -> str:
    """
    Format a duration the way the detail view shows ages.

    Example:
        >>> format_age(timedelta(days=3, hours=5))
        '3 days 5 hours'
        >>> format_age(timedelta(minutes=42))
        '42 mins'
    """
    day = timedelta(days=1)
    hour = timedelta(hours=1)

    parts = []
    if duration > day:
        parts.append(f"{duration // day} days")
        duration -= (duration // day) * day
    if duration > hour:
        parts.append(f"{duration // hour} hours")
    elif duration < hour:
        parts.append(f"{int(duration.total_seconds() // 60)} mins")
    return " ".join(parts)


class ReviewRenderer:
    """
    Render review screens to a Rich console.

    Example:
        >>> renderer = ReviewRenderer(session)
        >>> renderer.listing(tasks, total=len(tasks))
    """

    def __init__(self, session: ReviewSession, console: Console | None = None):
        self.session = session
        self.console = console or Console(highlight=False)

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def status_badge(self, task: Task) -> str:
        if task.status == TaskStatus.DELETED:
            return "X"
        if task.is_disputed():
            return "D"
        if self.session.is_reviewed(task):
            return "R"
        return "N"

    def summary_text(self, task: Task, index: int, total: int) -> Text:
        """Build the one-line summary for a task."""
        width = self.session.description_width
        color = task.color_label()
        badge = self.status_badge(task)

        line = Text()
        line.append(f" [{index:2d} of {total:2d}] ", style="white on red")
        line.append(f" {badge} ", style=STATUS_BADGES[badge])
        line.append(f" {task.assignee_label() or '':>13} ", style="black on yellow")
        line.append(f" {task.project or '':>12} ", style="on cyan")
        line.append(f" {task.description[:width]:<{width}}", style="black on white")
        line.append(f" {color or '':<10} ", style=COLOR_STYLES.get(color or "", UNCOLORED_STYLE))
        return line

    def summary(self, task: Task, index: int, total: int) -> None:
        self.console.print(self.summary_text(task, index, total), soft_wrap=True)

    def listing(self, view: list[Task], total: int) -> None:
        """
        Print the listing screen for the visible tasks.

        Args:
            view: Visible tasks, in display order
            total: Size of the whole working set
        """
        self.console.print()
        if self.session.show_all:
            self.console.print("> Showing all tasks.")
        else:
            self.console.print(f"> {total - len(view)} tasks already reviewed.")
        self.console.print(f"> Sorted by {self.session.sort_mode.label}.")
        self.console.print()

        for index, task in enumerate(view[: self.session.list_limit]):
            self.summary(task, index, len(view))

        self.console.print(f"\nFound {len(view)} tasks.")

    # ------------------------------------------------------------------
    # Detail view
    # ------------------------------------------------------------------

    def detail(self, task: Task, index: int, total: int) -> None:
        """Print the full detail view of one task."""
        now = self.session.now()
        self.console.print()
        self.summary(task, index, total)
        self.console.print()

        grid = Table.grid(padding=(0, 2))
        grid.add_column(style="bold")
        grid.add_column()

        if len(task.description) > self.session.description_width:
            grid.add_row("Description:", escape(task.description))

        tags = Text()
        for i, tag in enumerate(task.free_tags()):
            if i:
                tags.append(" ")
            tags.append(tag, style=("red", "green", "yellow", "blue", "magenta", "cyan")[i % 6])
        grid.add_row("Tags:", tags)

        started = _parse_or_none(task.created)
        finished = _parse_or_none(task.completed)
        if started is not None:
            grid.add_row("Started:", started.strftime(DATE_FORMAT))
        if finished is not None:
            grid.add_row(
                "Completed:",
                f"{finished.strftime(DATE_FORMAT)} [{format_age(now - finished)} ago]",
            )
        if started is not None:
            grid.add_row("Age:", format_age((finished or now) - started))
        grid.add_row("UUID:", task.uuid or "")
        xid = (task.model_extra or {}).get("xid")
        if xid:
            grid.add_row("XID:", escape(str(xid)))

        self.console.print(grid)
        self.console.print()

    # ------------------------------------------------------------------
    # Keys and prompts
    # ------------------------------------------------------------------

    def key_help(self, bindings: list[tuple[str, str]]) -> None:
        """Print a context's key help as one line of `key value` pairs."""
        line = Text()
        for key, value in bindings:
            line.append(f" {key} ", style="bold black on yellow")
            line.append(f" {value}  ")
        self.console.print(line)

    def picker(self, header: str, bindings: list[tuple[str, str]]) -> None:
        self.console.print(Text(f" {header}: ", style="white on red"), end="")
        self.key_help(bindings)

    def prompt(self, expression: str) -> None:
        self.console.print()
        self.console.print(Text(f"task {expression}>", style="white on blue"), end="")

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def conflict(self, error: TaskConflictError) -> None:
        self.console.print(
            Text(
                f"Task's mod time has changed [{error.expected!r} -> {error.actual!r}]. "
                "Please refresh before updating.",
                style="white on red",
            )
        )
        self.console.print("Press any key to refresh.")

    def fixing(self, task: Task) -> None:
        self.console.print(f"Fixing task: {escape(task.description)}")


def _parse_or_none(stamp: str | None) -> datetime | None:
    if not stamp:
        return None
    try:
        return parse_timestamp(stamp)
    except ValueError:
        return None
