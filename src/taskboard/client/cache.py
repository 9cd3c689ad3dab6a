# src/taskboard/client/cache.py

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import replace
from typing import Any

from ..tasks.task_models import Task

CacheSnapshot = tuple[Task, ...]


class TaskCache:
    """
    In-memory mirror of the server collection, owned by the client state.

    Tasks are frozen dataclasses, so a snapshot is just the tuple of current
    entries and a saved entry can be put back as is.
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: list[Task] = list(tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks)

    @property
    def tasks(self) -> list[Task]:
        """Copy of the current entries in cache order."""
        return list(self._tasks)

    def replace_all(self, tasks: Iterable[Task]) -> None:
        self._tasks = list(tasks)

    def snapshot(self) -> CacheSnapshot:
        return tuple(self._tasks)

    def index_of(self, task_id: str) -> int | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        return None

    def get(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def append(self, task: Task) -> None:
        self._tasks.append(task)

    def insert(self, index: int, task: Task) -> None:
        """Insert at `index`; past the end means append."""
        self._tasks.insert(index, task)

    def replace(self, task_id: str, task: Task) -> bool:
        """Swap the entry with `task_id` for `task`, keeping its position."""
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                self._tasks[i] = task
                return True
        return False

    def patch(self, task_id: str, **changes: Any) -> Task | None:
        current = self.get(task_id)
        if current is None:
            return None
        updated = replace(current, **changes)
        self.replace(task_id, updated)
        return updated

    def remove(self, task_id: str) -> Task | None:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return self._tasks.pop(i)
        return None
