# src/taskboard/client/views.py

"""Pure projections over the task cache: filter, sort, board columns, calendar."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Literal

from ..tasks.task_models import Task, TaskPriority, TaskStatus, date_key

SortField = Literal["title", "status", "priority", "assignee", "dueDate"]
SortDirection = Literal["asc", "desc"]

SORT_FIELDS: tuple[str, ...] = ("title", "status", "priority", "assignee", "dueDate")

STATUS_RANK = {s: i for i, s in enumerate(TaskStatus)}
PRIORITY_RANK = {
    TaskPriority.HIGH: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.LOW: 2,
}

DEFAULT_CELL_CAPACITY = 3


@dataclass(frozen=True, slots=True)
class TaskFilter:
    """Empty fields match everything."""

    search: str = ""
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assignee: str = ""

    def matches(self, task: Task) -> bool:
        if self.search:
            needle = self.search.lower()
            haystacks = (task.title, task.description or "")
            if not any(needle in h.lower() for h in haystacks):
                return False
        if self.status is not None and task.status != self.status:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        if self.assignee and task.assignee != self.assignee:
            return False
        return True


def filter_tasks(tasks: Iterable[Task], flt: TaskFilter) -> list[Task]:
    return [t for t in tasks if flt.matches(t)]


_SORT_KEYS: dict[str, Callable[[Task], Any]] = {
    "title": lambda t: t.title.casefold(),
    "status": lambda t: STATUS_RANK[t.status],
    "priority": lambda t: PRIORITY_RANK[t.priority],
    "assignee": lambda t: (t.assignee or "").casefold(),
    "dueDate": lambda t: t.due_date or "",
}


def sort_tasks(
    tasks: Iterable[Task],
    sort_field: SortField | str = "title",
    direction: SortDirection | str = "asc",
) -> list[Task]:
    """
    Stable sort by one field. Status and priority use their rank order, missing
    assignee/dueDate sort as "" (first when ascending).
    """
    key = _SORT_KEYS.get(sort_field)
    if key is None:
        raise ValueError(f"Unknown sort field: {sort_field!r} (expected one of {', '.join(SORT_FIELDS)})")
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {direction!r}")
    return sorted(tasks, key=key, reverse=direction == "desc")


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """All four columns, in board order, each keeping cache order."""
    columns: dict[TaskStatus, list[Task]] = {s: [] for s in TaskStatus}
    for t in tasks:
        columns[t.status].append(t)
    return columns


def group_by_date(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    """date key -> tasks due that day. Tasks without a due date are left out."""
    out: dict[str, list[Task]] = {}
    for t in tasks:
        if t.due_date:
            out.setdefault(t.due_date, []).append(t)
    return out


@dataclass(frozen=True, slots=True)
class CalendarCell:
    day: str
    visible: list[Task] = field(default_factory=list)
    overflow: list[Task] = field(default_factory=list)

    @property
    def more_label(self) -> str:
        return f"+{len(self.overflow)} more" if self.overflow else ""


def calendar_cell(day: str, tasks: list[Task], capacity: int = DEFAULT_CELL_CAPACITY) -> CalendarCell:
    capacity = max(0, capacity)
    return CalendarCell(day=day, visible=tasks[:capacity], overflow=tasks[capacity:])


def month_date_keys(year: int, month: int) -> list[str]:
    _, days = calendar.monthrange(year, month)
    return [date_key(date(year, month, d)) for d in range(1, days + 1)]


def month_cells(
    tasks: Iterable[Task],
    year: int,
    month: int,
    capacity: int = DEFAULT_CELL_CAPACITY,
) -> list[CalendarCell]:
    by_day = group_by_date(tasks)
    return [calendar_cell(k, by_day.get(k, []), capacity) for k in month_date_keys(year, month)]
