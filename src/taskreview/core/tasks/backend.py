"""
Task backend protocol and registry.

This module defines the TaskBackend protocol that task stores must
implement. The review console only needs two exchanges with a backend: a
raw export for a filter, and an import of one edited task.
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from .models import Task


class TaskBackendError(Exception):
    """Base class for fatal backend failures (transport, parse, consistency)."""

    pass


@runtime_checkable
class TaskBackend(Protocol):
    """
    Protocol for task backend implementations.

    Backends are responsible for:
    - Translating filter tokens into a query and parsing the results
    - Serializing one task and submitting it as an import
    - Raising TaskBackendError (or a subclass) on any failure; nothing is
      retried
    """

    def export(self, filter_args: list[str]) -> list[Task]:
        """
        Export every task matching the filter, unfiltered otherwise.

        Args:
            filter_args: Backend filter tokens (empty for all tasks)

        Returns:
            Tasks in backend order, including deleted and completed ones

        Raises:
            TaskBackendError: If the command fails or its output is malformed
        """
        ...

    def import_task(self, task: Task) -> None:
        """
        Submit one task (new or modified) to the backend.

        Args:
            task: Task to write

        Raises:
            TaskBackendError: If the import fails
        """
        ...

    @property
    def backend_name(self) -> str:
        """
        Get the name of this backend.

        Returns:
            Backend name (e.g., 'taskwarrior')
        """
        ...


# Backend registry
_backends: dict[str, Callable[..., TaskBackend]] = {}

DEFAULT_BACKEND = "taskwarrior"


def register_backend(
    name: str,
) -> Callable[[Callable[..., TaskBackend]], Callable[..., TaskBackend]]:
    """
    Decorator to register a task backend implementation.

    Usage:
        @register_backend('taskwarrior')
        class TaskwarriorBackend:
            def export(self, filter_args):
                ...

    Args:
        name: Backend name

    Returns:
        Decorator function
    """

    def decorator(backend_class: Callable[..., TaskBackend]) -> Callable[..., TaskBackend]:
        _backends[name] = backend_class
        return backend_class

    return decorator


def get_backend(name: str | None = None, **kwargs: object) -> TaskBackend:
    """
    Instantiate a registered task backend.

    Args:
        name: Backend name (defaults to 'taskwarrior')
        **kwargs: Passed through to the backend constructor

    Returns:
        TaskBackend instance

    Raises:
        ValueError: If the backend name is not registered
    """
    if name is None:
        name = DEFAULT_BACKEND

    backend_class = _backends.get(name)
    if backend_class is None:
        raise ValueError(
            f"Backend '{name}' not registered. Available backends: {', '.join(_backends.keys())}"
        )

    return backend_class(**kwargs)


def list_backends() -> list[str]:
    """List all registered backend names."""
    return list(_backends.keys())


def is_backend_available(name: str) -> bool:
    """Check if a backend is registered."""
    return name in _backends
