# tests/test_task_models.py

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from taskboard.tasks.task_models import (
    Task,
    TaskPriority,
    TaskStatus,
    date_key,
    format_timestamp,
    is_date_key,
    parse_timestamp,
)


def _task(**overrides) -> Task:
    ts = datetime(2025, 3, 1, 9, 30, 15, 123000, tzinfo=UTC)
    fields = dict(
        id="1",
        title="Write unit tests",
        status=TaskStatus.TODO,
        priority=TaskPriority.MEDIUM,
        created_at=ts,
        updated_at=ts,
    )
    fields.update(overrides)
    return Task(**fields)


def test_wire_form_is_camel_case_and_omits_unset_fields() -> None:
    wire = _task().to_wire()
    assert wire == {
        "id": "1",
        "title": "Write unit tests",
        "status": "todo",
        "priority": "medium",
        "createdAt": "2025-03-01T09:30:15.123Z",
        "updatedAt": "2025-03-01T09:30:15.123Z",
    }

    full = _task(description="d", assignee="jane", due_date="2025-03-04").to_wire()
    assert full["description"] == "d"
    assert full["assignee"] == "jane"
    assert full["dueDate"] == "2025-03-04"


def test_from_wire_restores_the_same_task() -> None:
    task = _task(status=TaskStatus.IN_REVIEW, assignee="alice", due_date="2025-12-31")
    assert Task.from_wire(task.to_wire()) == task


@pytest.mark.parametrize(
    "patch",
    [
        {"status": "doing"},
        {"priority": "urgent"},
        {"dueDate": "2025-02-30"},
        {"dueDate": "31/12/2025"},
    ],
)
def test_from_wire_rejects_values_outside_the_enumerations(patch) -> None:
    raw = {**_task().to_wire(), **patch}
    with pytest.raises(ValueError):
        Task.from_wire(raw)


def test_from_wire_rejects_missing_title() -> None:
    raw = _task().to_wire()
    del raw["title"]
    with pytest.raises(KeyError):
        Task.from_wire(raw)


def test_timestamps_round_trip_and_naive_values_are_utc() -> None:
    ts = datetime(2025, 1, 2, 3, 4, 5, 6000, tzinfo=UTC)
    assert parse_timestamp(format_timestamp(ts)) == ts
    assert parse_timestamp("2025-01-02T03:04:05") == datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)


def test_date_keys() -> None:
    assert date_key(date(2025, 7, 4)) == "2025-07-04"
    assert is_date_key("2024-02-29")
    assert not is_date_key("2025-02-29")
    assert not is_date_key("2025-7-4")


def test_status_declaration_order_is_the_column_order() -> None:
    assert [s.value for s in TaskStatus] == ["todo", "in-progress", "in-review", "done"]
    assert TaskStatus.IN_REVIEW.label == "In Review"
