"""
Pytest configuration and shared fixtures.

Provides fixtures for sample tasks, an in-memory task backend, a scripted
terminal, a recording console and an isolated configuration environment.
"""

import io
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from rich.console import Console

from taskreview.core.keys.defaults import generate_mappings
from taskreview.core.keys.registry import KeyRegistry
from taskreview.core.review.session import ReviewSession
from taskreview.core.tasks.models import Task, format_timestamp
from taskreview.core.tasks.store import TaskStore, Vocabulary
from taskreview.display.renderer import ReviewRenderer

NOW = datetime(2024, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def stamp(hours_ago: float = 0) -> str:
    """Taskwarrior timestamp `hours_ago` hours before NOW."""
    return format_timestamp(NOW - timedelta(hours=hours_ago))


# ==============================================================================
# Fakes
# ==============================================================================


class FakeBackend:
    """
    In-memory task backend.

    export([uuid]) returns the matching record; any other filter returns every
    record. import_task stores the task and bumps its modified stamp the way
    Taskwarrior does. Calls are recorded for assertions.
    """

    def __init__(self, tasks: list[Task] | None = None):
        self.records: list[Task] = [t.model_copy(deep=True) for t in tasks or []]
        self.imports: list[Task] = []
        self.export_calls: list[list[str]] = []
        self._revision = 0

    def _next_stamp(self) -> str:
        self._revision += 1
        return format_timestamp(NOW + timedelta(minutes=self._revision))

    def export(self, filter_args: list[str]) -> list[Task]:
        self.export_calls.append(list(filter_args))
        if len(filter_args) == 1 and any(t.uuid == filter_args[0] for t in self.records):
            matches = [t for t in self.records if t.uuid == filter_args[0]]
        else:
            matches = self.records
        return [t.model_copy(deep=True) for t in matches]

    def import_task(self, task: Task) -> None:
        self.imports.append(task.model_copy(deep=True))
        stored = task.model_copy(deep=True)
        stored.modified = self._next_stamp()
        if stored.uuid is None:
            stored.uuid = f"new-{len(self.records)}"
            self.records.append(stored)
            return
        for i, existing in enumerate(self.records):
            if existing.uuid == stored.uuid:
                self.records[i] = stored
                return
        self.records.append(stored)

    def touch(self, uuid: str) -> str:
        """Simulate an edit made outside the console."""
        for record in self.records:
            if record.uuid == uuid:
                record.modified = self._next_stamp()
                return record.modified
        raise KeyError(uuid)

    def find(self, uuid: str) -> Task:
        return next(t for t in self.records if t.uuid == uuid)

    @property
    def backend_name(self) -> str:
        return "fake"


class ScriptedTerminal:
    """Terminal that replays keys and lines; exhausted input reads as EOF."""

    def __init__(self, keys: str | list[str] = "", lines: list[str] | None = None):
        self.keys = list(keys)
        self.lines = list(lines or [])
        self.prompts: list[str] = []
        self.clears = 0

    def read_key(self) -> str:
        return self.keys.pop(0) if self.keys else ""

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.lines.pop(0) if self.lines else ""

    def clear(self) -> None:
        self.clears += 1


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def sample_task():
    """Provide a single open task as exported by Taskwarrior."""
    return Task.model_validate(
        {
            "id": 1,
            "uuid": "aaaa-0001",
            "description": "Write quarterly report",
            "project": "work",
            "status": "pending",
            "entry": stamp(72),
            "modified": stamp(2),
            "urgency": 5.0,
            "tags": ["@alice", "red", "next"],
        }
    )


@pytest.fixture
def sample_tasks():
    """Provide an open working set: colored, uncolored and already reviewed."""
    return [
        Task.model_validate(
            {
                "id": 1,
                "uuid": "aaaa-0001",
                "description": "Write quarterly report",
                "project": "work",
                "status": "pending",
                "entry": stamp(72),
                "modified": stamp(2),
                "urgency": 5.0,
                "tags": ["@alice", "red", "next"],
            }
        ),
        Task.model_validate(
            {
                "id": 2,
                "uuid": "aaaa-0002",
                "description": "Fix the garden fence",
                "project": "home",
                "status": "pending",
                "entry": stamp(48),
                "modified": stamp(3),
                "urgency": 9.0,
                "tags": ["@bob", "errand"],
            }
        ),
        Task.model_validate(
            {
                "id": 3,
                "uuid": "aaaa-0003",
                "description": "Book dentist",
                "project": "home",
                "status": "pending",
                "entry": stamp(24),
                "modified": stamp(1),
                "reviewed": stamp(1),
                "urgency": 1.0,
                "tags": ["@alice", "blue"],
            }
        ),
    ]


@pytest.fixture
def completed_task():
    """Provide a task completed two days ago."""
    return Task.model_validate(
        {
            "uuid": "cccc-0001",
            "description": "Renew passport",
            "project": "home",
            "status": "completed",
            "entry": stamp(200),
            "end": stamp(48),
            "modified": stamp(48),
            "tags": ["@alice", "green"],
        }
    )


# ==============================================================================
# Component Fixtures
# ==============================================================================


@pytest.fixture
def backend(sample_tasks):
    return FakeBackend(sample_tasks)


@pytest.fixture
def store(backend):
    return TaskStore(backend)


@pytest.fixture
def session():
    """Review session pinned to NOW."""
    return ReviewSession(reviewer_tag="r:tester", clock=lambda: NOW)


@pytest.fixture
def console():
    """Rich console that records plain text output."""
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


@pytest.fixture
def renderer(session, console):
    return ReviewRenderer(session, console)


@pytest.fixture
def keys():
    """
    Key registry generated from a small vocabulary.

    project: h home, w work; assignee: a alice, b bob; tag: n next, e errand;
    plus every built-in binding on its preferred key.
    """
    vocabulary = Vocabulary(
        projects=["home", "work"],
        assignees=["alice", "bob"],
        tags=["next", "errand"],
    )
    return generate_mappings(KeyRegistry(), vocabulary)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_stamp():
    """Provide the `stamp(hours_ago)` helper."""
    return stamp


@pytest.fixture
def make_backend():
    """Provide the FakeBackend class."""
    return FakeBackend


@pytest.fixture
def make_terminal():
    """Provide the ScriptedTerminal class."""
    return ScriptedTerminal


# ==============================================================================
# Mock Fixtures
# ==============================================================================


@pytest.fixture
def mock_subprocess_run(monkeypatch):
    """
    Provide a mock for subprocess.run that can be configured per test.

    Usage:
        def test_something(mock_subprocess_run):
            mock_subprocess_run.configure(stdout='[{"uuid": "a"}]')
    """
    mock = Mock()
    mock.stdout = ""
    mock.stderr = ""
    mock.returncode = 0
    mock.calls = []

    def configure(stdout="", stderr="", returncode=0):
        mock.stdout = stdout
        mock.stderr = stderr
        mock.returncode = returncode
        return mock

    def fake_run(*args, **kwargs):
        mock.calls.append((args, kwargs))
        return mock

    mock.configure = configure

    import subprocess

    monkeypatch.setattr(subprocess, "run", fake_run)

    return mock


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """
    Provide a clean environment without TASKREVIEW_* env vars.
    """
    for key in list(os.environ.keys()):
        if key.startswith("TASKREVIEW_"):
            monkeypatch.delenv(key, raising=False)

    monkeypatch.setenv("XDG_CONFIG_HOME", "/tmp/test-config")

    return monkeypatch


@pytest.fixture
def isolated_config(clean_env, tmp_path, monkeypatch):
    """
    Provide completely isolated config environment.

    Sets XDG_CONFIG_HOME and the working directory to temporary locations
    so no real user or project config is loaded.
    """
    config_home = tmp_path / "config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))

    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)

    from taskreview.core.config import clear_cache

    clear_cache()
    yield config_home
    clear_cache()
