"""
Tests for TaskStore: working set construction and the concurrency guard.
"""

from unittest.mock import Mock

import pytest

from taskreview.core.tasks.models import Task
from taskreview.core.tasks.sorting import SortMode
from taskreview.core.tasks.store import (
    TaskConflictError,
    TaskConsistencyError,
    TaskStore,
)


@pytest.fixture
def history(make_stamp):
    """Open, recently completed, older completed and deleted tasks."""
    return [
        Task(uuid="open", created=make_stamp(10), urgency=2),
        Task(uuid="done-3d", status="completed", completed=make_stamp(72), urgency=1),
        Task(uuid="done-10d", status="completed", completed=make_stamp(240), urgency=3),
        Task(uuid="deleted", status="deleted", created=make_stamp(5)),
        Task(uuid="deleted-done", status="deleted", completed=make_stamp(1)),
    ]


# ==============================================================================
# fetch
# ==============================================================================


class TestFetch:
    def test_open_only_without_completion_token(self, make_backend, history, now):
        store = TaskStore(make_backend(history))
        assert [t.uuid for t in store.fetch("project:home", now=now)] == ["open"]

    def test_completion_token_is_not_sent_to_backend(self, make_backend, history, now):
        backend = make_backend(history)
        TaskStore(backend).fetch("project:home _end", now=now)
        assert backend.export_calls == [["project:home"]]

    def test_one_week_window(self, make_backend, history, now):
        store = TaskStore(make_backend(history))
        assert [t.uuid for t in store.fetch("_end", now=now)] == ["done-3d"]

    def test_repeated_token_widens_window(self, make_backend, history, now):
        store = TaskStore(make_backend(history))
        tasks = store.fetch("_end _end", SortMode.URGENCY, now=now)
        assert [t.uuid for t in tasks] == ["done-10d", "done-3d"]

    def test_sorted_by_mode(self, store, now):
        assert [t.urgency for t in store.fetch("x", SortMode.URGENCY, now=now)] == [9, 5, 1]

    def test_unreadable_completion_time(self, make_backend, now):
        store = TaskStore(make_backend([Task(uuid="x", completed="last tuesday")]))
        with pytest.raises(TaskConsistencyError, match="unreadable completion"):
            store.fetch("_end", now=now)


# ==============================================================================
# get
# ==============================================================================


class TestGet:
    def test_single_record(self, store):
        assert store.get("aaaa-0002").description == "Fix the garden fence"

    def test_zero_records(self):
        backend = Mock()
        backend.export.return_value = []
        with pytest.raises(TaskConsistencyError):
            TaskStore(backend).get("missing")

    def test_duplicate_records(self):
        backend = Mock()
        backend.export.return_value = [Task(uuid="dup"), Task(uuid="dup")]
        with pytest.raises(TaskConsistencyError):
            TaskStore(backend).get("dup")


# ==============================================================================
# update (concurrency guard)
# ==============================================================================


class TestUpdate:
    def test_conflict_scenario(self):
        """Task loaded at T1, backend now at T2: no import is issued."""
        backend = Mock()
        backend.export.return_value = [Task(uuid="u-1", modified="T2")]
        loaded = Task(uuid="u-1", modified="T1", description="edited")

        with pytest.raises(TaskConflictError) as exc_info:
            TaskStore(backend).update(loaded)

        backend.import_task.assert_not_called()
        backend.export.assert_called_once_with(["u-1"])
        assert exc_info.value.expected == "T1"
        assert exc_info.value.actual == "T2"
        assert "refresh before updating" in str(exc_info.value)

    def test_unchanged_stamp_imports(self):
        backend = Mock()
        backend.export.return_value = [Task(uuid="u-1", modified="T1")]
        edited = Task(uuid="u-1", modified="T1", description="edited")

        TaskStore(backend).update(edited)

        backend.import_task.assert_called_once_with(edited)

    def test_duplicate_identity_is_fatal(self):
        backend = Mock()
        backend.export.return_value = [Task(uuid="u-1"), Task(uuid="u-1")]
        with pytest.raises(TaskConsistencyError, match="more than 1 task"):
            TaskStore(backend).update(Task(uuid="u-1"))
        backend.import_task.assert_not_called()

    def test_unknown_identity_imports(self):
        backend = Mock()
        backend.export.return_value = []
        task = Task(uuid="u-9", modified="T1")
        TaskStore(backend).update(task)
        backend.import_task.assert_called_once_with(task)

    def test_new_task_skips_guard(self):
        backend = Mock()
        task = Task(description="Brand new")
        TaskStore(backend).update(task)
        backend.export.assert_not_called()
        backend.import_task.assert_called_once_with(task)

    def test_guard_reads_completed_tasks(self, make_backend, completed_task):
        backend = make_backend([completed_task])
        edited = completed_task.model_copy(update={"description": "Renew both passports"})
        TaskStore(backend).update(edited)
        assert backend.find("cccc-0001").description == "Renew both passports"

    def test_refetch_after_update_has_new_modified(self, store):
        loaded = store.get("aaaa-0001")
        store.update(loaded.model_copy(update={"description": "Write annual report"}))

        refetched = store.get("aaaa-0001")
        assert refetched.description == "Write annual report"
        assert refetched.modified != loaded.modified

        # The refreshed copy passes the guard again
        store.update(refetched.model_copy(update={"project": "home"}))
        assert store.get("aaaa-0001").project == "home"

    def test_external_edit_detected(self, backend, store):
        loaded = store.get("aaaa-0001")
        backend.touch("aaaa-0001")
        with pytest.raises(TaskConflictError):
            store.update(loaded.model_copy(update={"description": "Mine"}))
        assert backend.imports == []


# ==============================================================================
# vocabulary
# ==============================================================================


class TestVocabulary:
    def test_first_seen_order(self, store):
        vocab = store.vocabulary()
        assert vocab.projects == ["work", "home"]
        assert vocab.assignees == ["alice", "bob"]
        assert vocab.tags == ["next", "errand"]

    def test_skips_closed_tasks(self, make_backend, completed_task):
        deleted = Task(uuid="d", status="deleted", project="attic", tags=["junk"])
        store = TaskStore(make_backend([completed_task, deleted]))
        vocab = store.vocabulary()
        assert vocab.projects == []
        assert vocab.assignees == []
        assert vocab.tags == []
