# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

Server operations depend on TaskRepo and the client protocol depends on TaskApi,
both Protocols. This keeps the JSON store and the HTTP transport swappable and
makes testing easier (tests plug in in-memory fakes).
"""

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any, Iterable, Protocol

from ..tasks.task_models import Task

Notifier = Callable[[str], None]
# Non-fatal user notification sink (console line, toast, log).


class TaskRepo(Protocol):
    """Whole-collection persistence: no partial updates."""

    def load_all(self) -> list[Task]: ...
    def save_all(self, tasks: Iterable[Task]) -> None: ...
    def transaction(self) -> AbstractContextManager[list[Task]]: ...


class TaskApi(Protocol):
    """Client-side view of the HTTP Task API. Every call may raise on failure."""

    async def list_tasks(self) -> list[Task]: ...
    async def get_task(self, task_id: str) -> Task: ...
    async def create_task(self, payload: dict[str, Any]) -> Task: ...
    async def update_task(self, task_id: str, patch: dict[str, Any]) -> Task: ...
    async def delete_task(self, task_id: str) -> None: ...
    async def duplicate_task(self, task_id: str) -> Task: ...
