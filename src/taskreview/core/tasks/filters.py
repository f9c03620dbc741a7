"""
Filter expressions.

A filter expression is a whitespace-separated list of Taskwarrior filter
tokens plus a reserved completion token. Each completion token widens the
window of completed tasks by one period; without it only open tasks are
reviewed.
"""

from dataclasses import dataclass, field

from .models import ASSIGNEE_SIGIL

COMPLETED_TOKEN = "_end"
PROJECT_PREFIX = "project:"
TAG_PREFIX = "+"


@dataclass
class FilterSpec:
    """A parsed filter expression."""

    args: list[str] = field(default_factory=list)
    completed_periods: int = 0

    @property
    def wants_completed(self) -> bool:
        return self.completed_periods > 0


def parse_filter(expression: str) -> FilterSpec:
    """
    Split a filter expression into backend args and the completion window.

    Example:
        >>> parse_filter("project:home _end _end +next")
        FilterSpec(args=['project:home', '+next'], completed_periods=2)
    """
    spec = FilterSpec()
    for token in expression.split():
        if token == COMPLETED_TOKEN:
            spec.completed_periods += 1
        else:
            spec.args.append(token)
    return spec


def _append(expression: str, token: str) -> str:
    token = token.strip()
    if not token:
        return expression
    return f"{expression} {token}".strip()


def add_completed(expression: str) -> str:
    return _append(expression, COMPLETED_TOKEN)


def add_project(expression: str, project: str) -> str:
    return _append(expression, f"{PROJECT_PREFIX}{project}")


def add_tag(expression: str, tag: str) -> str:
    return _append(expression, f"{TAG_PREFIX}{tag}")


def add_assignee(expression: str, name: str) -> str:
    return _append(expression, f"{TAG_PREFIX}{ASSIGNEE_SIGIL}{name}")


def add_terms(expression: str, terms: str) -> str:
    return _append(expression, terms)


def filter_defaults(expression: str) -> tuple[str | None, str | None]:
    """
    Extract the project and assignee a filter is scoped to.

    Used to seed new tasks created from the shell.

    Returns:
        (project, assignee_label) where assignee_label keeps its sigil
    """
    project: str | None = None
    assignee: str | None = None
    for token in expression.split():
        if token.startswith(PROJECT_PREFIX):
            project = token[len(PROJECT_PREFIX) :] or None
        elif token.startswith(TAG_PREFIX + ASSIGNEE_SIGIL):
            assignee = token[len(TAG_PREFIX) :]
    return project, assignee
