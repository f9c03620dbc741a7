"""
Filter shell.

The top-level loop of the console: the user builds a filter expression one
keystroke at a time, presses Enter to review the matching working set, and
can create new tasks scoped to the current filter.
"""

from __future__ import annotations

import logging

from taskreview.core.keys.defaults import ASSIGNEE, PROJECT, SHELL, TAG
from taskreview.core.keys.registry import KeyRegistry
from taskreview.core.review.machine import ENTER_KEYS, ReviewMachine, ReviewTerminal
from taskreview.core.review.session import ReviewSession
from taskreview.core.tasks import filters
from taskreview.core.tasks.models import ASSIGNEE_SIGIL, Task, TaskStatus
from taskreview.core.tasks.store import TaskStore
from taskreview.display.renderer import ReviewRenderer

logger = logging.getLogger(__name__)


class ReviewShell:
    """
    Filter-accumulation loop.

    Example:
        >>> shell = ReviewShell(store, keys, session, terminal, renderer)
        >>> shell.run("project:home")
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
        self.machine = ReviewMachine(store, keys, session, terminal, renderer)

    def run(self, initial_filter: str = "") -> None:
        """Loop until the user quits."""
        expression = initial_filter.strip()
        while True:
            result = self.step(expression)
            if result is None:
                return
            expression = result.strip()

    def step(self, expression: str) -> str | None:
        """
        Show the prompt, read one key and act on it.

        Args:
            expression: Current filter expression

        Returns:
            The next filter expression, or None to quit
        """
        self.terminal.clear()
        self.renderer.key_help(self.keys.bindings(SHELL))
        self.renderer.prompt(expression)

        key = self.terminal.read_key()
        if not key:
            return None
        if key in ENTER_KEYS:
            if expression.strip():
                self.review(expression)
            return expression

        action, found = self.keys.maps_to(key, SHELL)
        if not found:
            return expression

        if action == "quit":
            return None
        if action == "clear":
            return ""
        if action == "completed":
            return filters.add_completed(expression)
        if action == "search":
            return filters.add_terms(expression, self.terminal.read_line("Enter search terms: "))
        if action == "assigned":
            name = self._pick(ASSIGNEE, "Assign To")
            return filters.add_assignee(expression, name) if name else expression
        if action == "project":
            project = self._pick(PROJECT, "Project")
            return filters.add_project(expression, project) if project else expression
        if action == "tag":
            tag = self._pick(TAG, "Tag")
            return filters.add_tag(expression, tag) if tag else expression
        if action == "new":
            self.new_task(expression)
        return expression

    def review(self, expression: str) -> None:
        """Fetch the working set for a filter and review it."""
        tasks = self.store.fetch(expression, self.session.sort_mode, now=self.session.now())
        logger.debug("Reviewing %d tasks for %r", len(tasks), expression)
        self.machine.run(tasks)

    def new_task(self, expression: str) -> Task | None:
        """
        Create a pending task scoped to the current filter.

        Project and assignee come from the filter when it names them and are
        picked otherwise. Nothing is written if a pick is cancelled or the
        description is left empty.

        Returns:
            The task that was imported, or None
        """
        project, assignee = filters.filter_defaults(expression)
        if project is None:
            project = self._pick(PROJECT, "Project")
            if project is None:
                return None
        if assignee is None:
            name = self._pick(ASSIGNEE, "Assign To")
            if name is None:
                return None
            assignee = f"{ASSIGNEE_SIGIL}{name}"

        description = self.terminal.read_line("Enter description: ").strip()
        if not description:
            return None

        task = Task(
            description=description,
            project=project,
            status=TaskStatus.PENDING,
            tags=[assignee, self.session.default_color],
        )
        self.store.update(task)
        logger.debug("Created task in project %s for %s", project, assignee)
        return task

    def _pick(self, context: str, header: str) -> str | None:
        self.renderer.picker(header, self.keys.bindings(context))
        value, found = self.keys.maps_to(self.terminal.read_key(), context)
        return value if found else None
