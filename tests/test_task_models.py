# tests/test_task_models.py

from __future__ import annotations

from datetime import UTC

from taskmaster.tasks.task_models import (
    UNSET,
    Suggestion,
    Task,
    TaskPatch,
    TaskPriority,
    parse_timestamp,
)


def test_patch_reports_only_set_fields() -> None:
    patch = TaskPatch(title="x", deadline=None)
    assert patch.changes() == {"title": "x", "deadline": None}
    assert TaskPatch().changes() == {}
    assert not UNSET


def test_patch_copies_lists() -> None:
    deps = ["a"]
    task = Task(id="1", created="c", updated="c")
    patched = TaskPatch(dependencies=deps).apply(task, updated="u")
    deps.append("b")
    assert patched.dependencies == ["a"]
    assert patched.updated == "u"
    assert task.dependencies == []


def test_from_dict_keeps_unknown_keys_and_tolerates_nulls() -> None:
    task = Task.from_dict(
        {
            "id": "1",
            "created": "2025-01-01T00:00:00.000Z",
            "title": "t",
            "dependencies": None,
            "legacy_field": 3,
        }
    )
    assert task.dependencies == []
    assert task.updated == task.created
    assert task.extra == {"legacy_field": 3}
    d = task.to_dict()
    assert d["legacy_field"] == 3
    assert "completed" not in d
    assert "extra" not in d


def test_patch_keeps_extra_keys() -> None:
    task = Task.from_dict({"id": "1", "created": "c", "assignee": "sam"})
    patched = TaskPatch(title="x").apply(task, updated="u")
    assert patched.to_dict()["assignee"] == "sam"
    assert patched.extra is not task.extra


def test_priority_rank() -> None:
    assert [TaskPriority.rank(p) for p in ("Critical", "High", "Medium", "Low")] == [0, 1, 2, 3]
    assert TaskPriority.rank(None) == 4
    assert TaskPriority.rank("urgent") == 4


def test_parse_timestamp_treats_dates_as_utc() -> None:
    dt = parse_timestamp("2030-01-15")
    assert dt is not None
    assert dt.tzinfo == UTC
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(None) is None


def test_suggestion_fields_are_pending_tasks() -> None:
    s = Suggestion(
        title="TODO: x",
        description="Found in a.js:1",
        category="Documentation",
        priority="Medium",
        notes="Original comment: // TODO: x",
    )
    fields = s.as_task_fields()
    assert fields["status"] == "Pending"
    assert set(fields) == {"title", "description", "category", "priority", "status", "notes"}
