"""
Per-run key generation.

Backend vocabulary (projects, assignees, free tags) is auto-assigned first,
in first-seen order, then built-in actions get their preferred keys where
those are still free.
"""

from taskreview.core.tasks.store import Vocabulary

from .registry import KeyRegistry

# Contexts
SHELL = "global-help"
LISTING = "menu"
EDITOR = "item-editor"
COLOR = "color"
ASSIGNEE = "assignee"
PROJECT = "project"
TAG = "tag"

# Built-in actions, as (preferred key, action) in display order.
COLOR_KEYS = [("r", "red"), ("b", "blue"), ("g", "green")]

SHELL_KEYS = [
    ("q", "quit"),
    ("c", "clear"),
    ("d", "completed"),
    ("a", "assigned"),
    ("p", "project"),
    ("n", "new"),
    ("t", "tag"),
    ("s", "search"),
]

EDITOR_KEYS = [
    ("e", "description"),
    ("a", "assigned"),
    ("p", "project"),
    ("c", "color"),
    ("t", "tags"),
    ("r", "reviewed"),
    ("b", "back"),
    ("q", "quit"),
    ("x", "delete"),
    ("d", "done"),
    ("i", "disputed"),
]

LISTING_KEYS = [
    ("f", "fix"),
    ("a", "toggle show all"),
    ("r", "review"),
    ("u", "sort by urgency"),
    ("d", "sort by date"),
    ("c", "sort by color"),
    ("g", "goto"),
    ("q", "quit"),
]

BUILTIN_KEYS = {
    COLOR: COLOR_KEYS,
    SHELL: SHELL_KEYS,
    EDITOR: EDITOR_KEYS,
    LISTING: LISTING_KEYS,
}


def generate_mappings(registry: KeyRegistry, vocabulary: Vocabulary) -> KeyRegistry:
    """
    Populate a registry for this run.

    Args:
        registry: Registry (usually freshly loaded from disk)
        vocabulary: Values observed on open tasks

    Returns:
        The same registry, for chaining
    """
    for project in vocabulary.projects:
        registry.auto_assign(project, PROJECT)
    for tag in vocabulary.tags:
        registry.auto_assign(tag, TAG)
    for name in vocabulary.assignees:
        registry.auto_assign(name, ASSIGNEE)

    for context, keys in BUILTIN_KEYS.items():
        for preferred, action in keys:
            registry.best_effort_assign(preferred, action, context)

    return registry
