# src/taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any

DATE_KEY_FORMAT = "%Y-%m-%d"


class TaskStatus(StrEnum):
    """Board column a task sits in. Declaration order is the column order."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    IN_REVIEW = "in-review"
    DONE = "done"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.IN_REVIEW: "In Review",
    TaskStatus.DONE: "Done",
}


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def utc_now() -> datetime:
    """Current UTC time truncated to milliseconds (the wire precision)."""
    now = datetime.now(UTC)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def format_timestamp(ts: datetime) -> str:
    return ts.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    ts = datetime.fromisoformat(raw)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def date_key(day: date) -> str:
    """Calendar bucket key for a day: YYYY-MM-DD."""
    return day.strftime(DATE_KEY_FORMAT)


def is_date_key(raw: str) -> bool:
    if len(raw) != 10:
        return False
    try:
        datetime.strptime(raw, DATE_KEY_FORMAT)
    except ValueError:
        return False
    return True


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    status: TaskStatus
    priority: TaskPriority
    created_at: datetime
    updated_at: datetime

    description: str | None = None
    assignee: str | None = None
    due_date: str | None = None

    @property
    def is_provisional(self) -> bool:
        return self.id.startswith(PROVISIONAL_ID_PREFIX)

    def to_wire(self) -> dict[str, Any]:
        """camelCase JSON form; unset optional fields are omitted."""
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "priority": self.priority.value,
        }
        if self.description is not None:
            out["description"] = self.description
        if self.assignee is not None:
            out["assignee"] = self.assignee
        if self.due_date is not None:
            out["dueDate"] = self.due_date
        out["createdAt"] = format_timestamp(self.created_at)
        out["updatedAt"] = format_timestamp(self.updated_at)
        return out

    @classmethod
    def from_wire(cls, raw: dict[str, Any]) -> Task:
        """
        Strict decode of the wire form.

        Raises KeyError/ValueError/TypeError on a malformed record; callers decide
        whether that is a store failure or a bad server response.
        """
        if not isinstance(raw, dict):
            raise TypeError(f"task record must be an object, got {type(raw).__name__}")

        due = raw.get("dueDate")
        if due is not None and not is_date_key(str(due)):
            raise ValueError(f"invalid dueDate: {due!r}")

        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            status=TaskStatus(raw["status"]),
            priority=TaskPriority(raw["priority"]),
            created_at=parse_timestamp(str(raw["createdAt"])),
            updated_at=parse_timestamp(str(raw["updatedAt"])),
            description=_opt_str(raw.get("description")),
            assignee=_opt_str(raw.get("assignee")),
            due_date=str(due) if due is not None else None,
        )


# Client-side ids for tasks that the server has not confirmed yet.
PROVISIONAL_ID_PREFIX = "temp-"

# Wire field name -> Task attribute, for the fields an update may carry.
MUTABLE_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "assignee": "assignee",
    "dueDate": "due_date",
}


def _opt_str(v: Any) -> str | None:
    return None if v is None else str(v)
