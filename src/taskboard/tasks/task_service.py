# src/taskboard/tasks/task_service.py

from __future__ import annotations

"""
Task operations behind the HTTP API.

Every operation is a full load-modify-save cycle against the store: the whole
collection is loaded inside store.transaction(), changed in memory and written
back with save_all(). The HTTP layer only maps these results and exceptions to
status codes.
"""

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from ..core.ports import TaskRepo
from .errors import InvalidInput, NotFound
from .task_models import MUTABLE_FIELDS, Task, TaskPriority, TaskStatus, is_date_key, utc_now

logger = logging.getLogger(__name__)

# "<base> (<n>)" as produced by duplicate; only used to strip a suffix off a source title.
_NUMBERED_TITLE_RE = re.compile(r"^(.+) \((\d+)\)$", re.DOTALL)


def split_numbered_title(title: str) -> tuple[str, int | None]:
    """'Report (2)' -> ('Report', 2); 'Report' -> ('Report', None)."""
    m = _NUMBERED_TITLE_RE.match(title)
    if not m:
        return title, None
    return m.group(1), int(m.group(2))


def title_number(title: str, base: str) -> int | None:
    """
    Number of `title` relative to `base`: 0 for the bare base, n for "base (n)",
    None for anything else. Literal comparison on the full title.
    """
    if title == base:
        return 0
    prefix = base + " ("
    if not (title.startswith(prefix) and title.endswith(")")):
        return None
    digits = title[len(prefix) : -1]
    if digits and digits.isascii() and digits.isdigit():
        return int(digits)
    return None


def next_duplicate_title(title: str, existing_titles: Iterable[str]) -> str:
    base, _ = split_numbered_title(title)
    numbers = [n for n in (title_number(t, base) for t in existing_titles) if n is not None]
    return f"{base} ({max(numbers, default=0) + 1})"


def _require_object(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise InvalidInput("Request body must be a JSON object")
    return payload


def _title(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidInput("Title is required")
    return raw.strip()


def _optional_text(name: str, raw: Any) -> str | None:
    """None and "" both mean "no value"."""
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise InvalidInput(f"{name} must be a string")
    return raw


def _status(raw: Any) -> TaskStatus:
    try:
        return TaskStatus(raw)
    except ValueError:
        raise InvalidInput(f"Invalid status: {raw!r}") from None


def _priority(raw: Any) -> TaskPriority:
    try:
        return TaskPriority(raw)
    except ValueError:
        raise InvalidInput(f"Invalid priority: {raw!r}") from None


def _due_date(raw: Any) -> str | None:
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str) or not is_date_key(raw):
        raise InvalidInput(f"Invalid dueDate (expected YYYY-MM-DD): {raw!r}")
    return raw


def _find(tasks: list[Task], task_id: str) -> int:
    for i, t in enumerate(tasks):
        if t.id == task_id:
            return i
    raise NotFound(task_id)


class TaskService:
    """Create / read / update / delete / duplicate over a whole-collection store."""

    def __init__(
        self,
        store: TaskRepo,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._clock = clock

    def _new_id(self, now: datetime, tasks: list[Task]) -> str:
        # Millisecond timestamp, bumped past any id already in the collection.
        taken = {t.id for t in tasks}
        candidate = int(now.timestamp() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def list_tasks(self) -> list[Task]:
        return self._store.load_all()

    def get_task(self, task_id: str) -> Task:
        tasks = self._store.load_all()
        return tasks[_find(tasks, task_id)]

    def create_task(self, payload: Any) -> Task:
        body = _require_object(payload)
        title = _title(body.get("title"))
        description = _optional_text("description", body.get("description"))
        assignee = _optional_text("assignee", body.get("assignee"))
        due_date = _due_date(body.get("dueDate"))
        raw_priority = body.get("priority")
        priority = _priority(raw_priority) if raw_priority else TaskPriority.MEDIUM

        with self._store.transaction() as tasks:
            now = self._clock()
            task = Task(
                id=self._new_id(now, tasks),
                title=title,
                description=description,
                status=TaskStatus.TODO,
                priority=priority,
                assignee=assignee,
                due_date=due_date,
                created_at=now,
                updated_at=now,
            )
            tasks.append(task)
            self._store.save_all(tasks)

        logger.info("Task created id=%s priority=%s", task.id, task.priority.value)
        return task

    def update_task(self, task_id: str, payload: Any) -> Task:
        body = _require_object(payload)

        # Presence, not truthiness: a key sent as null/"" clears optional fields.
        changes: dict[str, Any] = {}
        for wire_name, attr in MUTABLE_FIELDS.items():
            if wire_name not in body:
                continue
            raw = body[wire_name]
            if wire_name == "title":
                changes[attr] = _title(raw)
            elif wire_name == "status":
                changes[attr] = _status(raw)
            elif wire_name == "priority":
                changes[attr] = _priority(raw)
            elif wire_name == "dueDate":
                changes[attr] = _due_date(raw)
            else:
                changes[attr] = _optional_text(wire_name, raw)

        with self._store.transaction() as tasks:
            idx = _find(tasks, task_id)
            current = tasks[idx]
            # updated_at never moves backwards, even if the clock does.
            now = max(self._clock(), current.updated_at)
            updated = replace(current, **changes, updated_at=now)
            tasks[idx] = updated
            self._store.save_all(tasks)

        logger.info("Task updated id=%s fields=%s", task_id, sorted(changes))
        return updated

    def delete_task(self, task_id: str) -> None:
        with self._store.transaction() as tasks:
            idx = _find(tasks, task_id)
            del tasks[idx]
            self._store.save_all(tasks)
        logger.info("Task deleted id=%s", task_id)

    def duplicate_task(self, task_id: str) -> Task:
        with self._store.transaction() as tasks:
            source = tasks[_find(tasks, task_id)]
            now = self._clock()
            copy = replace(
                source,
                id=self._new_id(now, tasks),
                title=next_duplicate_title(source.title, (t.title for t in tasks)),
                status=TaskStatus.TODO,
                created_at=now,
                updated_at=now,
            )
            tasks.append(copy)
            self._store.save_all(tasks)

        logger.info("Task duplicated source=%s id=%s title=%r", task_id, copy.id, copy.title)
        return copy
