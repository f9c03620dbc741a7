"""
Task models, backends and the guarded task store.

This module provides the Task model and label vocabulary, the TaskBackend
protocol with its registry, the sort engine, filter parsing and the
TaskStore that every review edit is written through.
"""

from .backend import (
    TaskBackend,
    TaskBackendError,
    get_backend,
    is_backend_available,
    list_backends,
    register_backend,
)
from .models import Task, TaskStatus
from .sorting import SortMode, sort_in_place, sort_tasks
from .store import TaskConflictError, TaskConsistencyError, TaskStore, Vocabulary

# Import backend implementations to trigger registration
from . import taskwarrior  # noqa: F401

__all__ = [
    # Models
    "Task",
    "TaskStatus",
    # Sorting
    "SortMode",
    "sort_tasks",
    "sort_in_place",
    # Store
    "TaskStore",
    "TaskConflictError",
    "TaskConsistencyError",
    "Vocabulary",
    # Backend protocol and registry
    "TaskBackend",
    "TaskBackendError",
    "register_backend",
    "get_backend",
    "list_backends",
    "is_backend_available",
]
