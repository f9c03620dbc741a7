"""
Review state machine.

Drives one working set through three states:

    LISTING  - summarize the visible tasks and wait for a menu key
    EDITING  - show one task in detail and wait for an item-editor key
    DONE     - leave this working set and return to the shell

Every edit builds a candidate copy (see edits.py) and goes through
TaskStore.update, so the concurrency guard sees every write. After each
write attempt the slot is re-read from the backend.

Usage:
    >>> machine = ReviewMachine(store, keys, session, terminal, renderer)
    >>> machine.run(store.fetch("project:home", session.sort_mode))
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from taskreview.core.keys.defaults import ASSIGNEE, COLOR, EDITOR, LISTING, PROJECT, TAG
from taskreview.core.keys.registry import KeyRegistry
from taskreview.core.tasks.models import Task
from taskreview.core.tasks.sorting import SortMode, sort_in_place
from taskreview.core.tasks.store import TaskConflictError, TaskStore

from . import edits
from .session import ReviewSession

if TYPE_CHECKING:
    from taskreview.display.renderer import ReviewRenderer

logger = logging.getLogger(__name__)

ENTER_KEYS = ("\n", "\r")

SORT_ACTIONS = {
    "sort by urgency": SortMode.URGENCY,
    "sort by date": SortMode.RECENCY,
    "sort by color": SortMode.COLOR,
}


class ReviewState(str, Enum):
    LISTING = "listing"
    EDITING = "editing"
    DONE = "done"


class ReviewTerminal(Protocol):
    """Input side of the console, in single-keystroke mode by default."""

    def read_key(self) -> str:
        """Read one keystroke; empty string at end of input."""
        ...

    def read_line(self, prompt: str) -> str:
        """Read one line in line-buffered mode."""
        ...

    def clear(self) -> None: ...


class ReviewMachine:
    """
    Listing / Editing / Done loop over one working set.

    Attributes:
        tasks: The working set, re-sorted in place by sort commands
        view: Tasks shown by the last listing (what indexes refer to)
        state: Current state
        index: Current position in `view` while editing
    """

    def __init__(
        self,
        store: TaskStore,
        keys: KeyRegistry,
        session: ReviewSession,
        terminal: ReviewTerminal,
        renderer: ReviewRenderer,
    ) -> None:
        self.store = store
        self.keys = keys
        self.session = session
        self.terminal = terminal
        self.renderer = renderer

        self.tasks: list[Task] = []
        self.view: list[Task] = []
        self.state = ReviewState.LISTING
        self.index = 0

        self._editors: dict[str, Callable[[Task], Task | None]] = {
            "description": self._edit_description,
            "assigned": self._edit_assignee,
            "project": self._edit_project,
            "color": self._edit_color,
            "tags": self._edit_tags,
            "reviewed": self._mark_reviewed,
            "done": edits.mark_done,
            "delete": edits.mark_deleted,
            "disputed": self._mark_disputed,
        }

    def run(self, tasks: list[Task]) -> list[Task]:
        """
        Review a working set until the user leaves it.

        Args:
            tasks: Working set, already sorted by the session's mode

        Returns:
            The working set as last refreshed from the backend
        """
        self.tasks = tasks
        self.view = []
        self.state = ReviewState.LISTING
        self.index = 0

        while self.state != ReviewState.DONE:
            if self.state == ReviewState.LISTING:
                self._listing_step()
            else:
                self._editing_step()

        return self.tasks

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def _listing_step(self) -> None:
        self.view = self.session.visible(self.tasks)
        self.renderer.listing(self.view, total=len(self.tasks))
        self.renderer.key_help(self.keys.bindings(LISTING))

        key = self.terminal.read_key()
        if not key or key in ENTER_KEYS:
            self.state = ReviewState.DONE
            return

        action, found = self.keys.maps_to(key, LISTING)
        if not found:
            return

        if action == "quit":
            self.state = ReviewState.DONE
        elif action == "review":
            self._enter_editing(0)
        elif action == "goto":
            self._goto()
        elif action == "toggle show all":
            self.session.show_all = not self.session.show_all
            self.terminal.clear()
        elif action in SORT_ACTIONS:
            self.session.sort_mode = SORT_ACTIONS[action]
            sort_in_place(self.tasks, self.session.sort_mode)
            self.terminal.clear()
        elif action == "fix":
            self._bulk_fix()

    def _goto(self) -> None:
        raw = self.terminal.read_line("Jump to: ")
        try:
            target = int(raw.strip())
        except ValueError:
            logger.debug("Ignoring jump target %r", raw)
            return
        if 0 <= target < len(self.view):
            self._enter_editing(target)

    def _enter_editing(self, index: int) -> None:
        self.state = ReviewState.EDITING
        self.index = index

    def _bulk_fix(self) -> None:
        """Give every uncolored task in the working set the default color."""
        for i, task in enumerate(self.tasks):
            if task.color_label() is not None:
                continue
            self.renderer.fixing(task)
            try:
                self.store.update(edits.set_color(task, self.session.default_color))
            except TaskConflictError as e:
                self.renderer.conflict(e)
                continue
            if task.uuid:
                self.tasks[i] = self.store.get(task.uuid)

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _editing_step(self) -> None:
        if not 0 <= self.index < len(self.view):
            self.state = ReviewState.DONE
            return

        task = self.view[self.index]
        self.terminal.clear()
        self.renderer.detail(task, self.index, len(self.view))
        self.renderer.key_help(self.keys.bindings(EDITOR))

        key = self.terminal.read_key()
        if not key:
            self.state = ReviewState.DONE
            return

        action, found = self.keys.maps_to(key, EDITOR)
        if not found:
            self._move(1)
        elif action == "back":
            self._move(-1)
        elif action == "quit":
            self.state = ReviewState.DONE
        elif action in self._editors:
            self._move(self._apply(task, self._editors[action]))
        else:
            self._move(1)

    def _move(self, step: int) -> None:
        target = self.index + step
        if target < 0:
            self.state = ReviewState.LISTING
        elif target >= len(self.view):
            self.state = ReviewState.DONE
        else:
            self.index = target

    def _apply(self, task: Task, editor: Callable[[Task], Task | None]) -> int:
        """
        Build a candidate, write it and refresh the slot.

        Returns:
            Step delta: 1 normally, 0 after an acknowledged conflict
        """
        candidate = editor(task)
        if candidate is None:
            return 1

        step = 1
        try:
            self.store.update(candidate)
        except TaskConflictError as e:
            self.renderer.conflict(e)
            self.terminal.read_key()
            step = 0
        self._refresh(task)
        return step

    def _refresh(self, task: Task) -> None:
        if not task.uuid:
            return
        fresh = self.store.get(task.uuid)
        self.view[self.index] = fresh
        for i, candidate in enumerate(self.tasks):
            if candidate.uuid == task.uuid:
                self.tasks[i] = fresh
                break

    def _pick(self, context: str, header: str) -> str | None:
        self.renderer.picker(header, self.keys.bindings(context))
        value, found = self.keys.maps_to(self.terminal.read_key(), context)
        return value if found else None

    def _edit_description(self, task: Task) -> Task | None:
        text = self.terminal.read_line("Enter description: ").strip()
        if not text:
            return None
        return edits.set_description(task, text)

    def _edit_assignee(self, task: Task) -> Task | None:
        name = self._pick(ASSIGNEE, "Assign To")
        return edits.set_assignee(task, name) if name else None

    def _edit_project(self, task: Task) -> Task | None:
        project = self._pick(PROJECT, "Project")
        return edits.set_project(task, project) if project else None

    def _edit_color(self, task: Task) -> Task | None:
        color = self._pick(COLOR, "Task Color")
        return edits.set_color(task, color) if color else None

    def _edit_tags(self, task: Task) -> Task | None:
        tag = self._pick(TAG, "Tags")
        return edits.toggle_tag(task, tag) if tag else None

    def _mark_reviewed(self, task: Task) -> Task | None:
        if self.session.is_reviewed(task):
            return None
        return edits.mark_reviewed(task, self.session.reviewer_tag, self.session.now())

    def _mark_disputed(self, task: Task) -> Task | None:
        if task.is_disputed():
            return None
        return edits.mark_disputed(task)
