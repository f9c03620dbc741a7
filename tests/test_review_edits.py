"""
Tests for the pure task edit operations.
"""

import pytest

from taskreview.core.review import edits
from taskreview.core.tasks.models import Task, TaskStatus, format_timestamp


class TestLabelEdits:
    def test_assignee_scenario(self):
        """{@alice, red} reassigned to bob gives {red, @bob}."""
        task = Task(tags=["@alice", "red"])
        edited = edits.set_assignee(task, "bob")
        assert sorted(edited.tags) == ["@bob", "red"]
        assert task.tags == ["@alice", "red"]

    def test_assignee_strips_every_prior_label(self):
        edited = edits.set_assignee(Task(tags=["@alice", "@carol", "next"]), "@bob")
        assert edited.tags == ["next", "@bob"]

    def test_color_replaces_prior_color(self):
        edited = edits.set_color(Task(tags=["red", "next", "blue"]), "green")
        assert edited.tags == ["next", "green"]

    def test_color_must_be_reserved(self):
        with pytest.raises(ValueError):
            edits.set_color(Task(), "purple")

    def test_toggle_tag(self):
        added = edits.toggle_tag(Task(tags=["red"]), "next")
        assert added.tags == ["red", "next"]
        removed = edits.toggle_tag(added, "next")
        assert removed.tags == ["red"]

    def test_disputed_is_idempotent(self):
        once = edits.mark_disputed(Task(tags=["red"]))
        twice = edits.mark_disputed(once)
        assert twice.tags == ["red", "disputed"]


class TestFieldEdits:
    def test_description_is_trimmed(self):
        assert edits.set_description(Task(), "  Call plumber \n").description == "Call plumber"

    def test_project(self):
        assert edits.set_project(Task(project="home"), "work").project == "work"

    def test_done_and_deleted(self, sample_task):
        assert edits.mark_done(sample_task).status == TaskStatus.COMPLETED
        assert edits.mark_deleted(sample_task).status == TaskStatus.DELETED
        assert sample_task.status == TaskStatus.PENDING

    def test_edits_keep_modified_stamp(self, sample_task):
        """The guard compares against the stamp captured at load time."""
        assert edits.set_project(sample_task, "home").modified == sample_task.modified


class TestMarkReviewed:
    def test_open_task_gets_marker(self, sample_task, now):
        edited = edits.mark_reviewed(sample_task, "r:me", now)
        assert edited.reviewed == format_timestamp(now)
        assert "r:me" not in edited.tags
        assert edited.is_reviewed("r:me", now=now)

    def test_completed_task_gets_tag(self, completed_task, now):
        edited = edits.mark_reviewed(completed_task, "r:me", now)
        assert edited.tags.count("r:me") == 1
        assert edited.reviewed is None
        assert edits.mark_reviewed(edited, "r:me", now).tags.count("r:me") == 1
