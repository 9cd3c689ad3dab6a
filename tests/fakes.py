# tests/fakes.py

from __future__ import annotations

import asyncio
import contextlib
import threading
from collections.abc import Awaitable, Iterable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from taskboard.client.api_client import ApiError
from taskboard.tasks.errors import TaskBoardError
from taskboard.tasks.task_models import Task
from taskboard.tasks.task_service import TaskService


class FakeClock:
    """Deterministic clock: every call moves forward by `step` (or backwards if negative)."""

    def __init__(
        self,
        start: datetime = datetime(2025, 3, 1, 9, 0, tzinfo=UTC),
        step: timedelta = timedelta(milliseconds=1),
    ) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


class InMemoryTaskRepo:
    """TaskRepo without a file; same whole-collection semantics as JsonTaskStore."""

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self.tasks: list[Task] = list(tasks)
        self.saves = 0
        self._lock = threading.RLock()

    def load_all(self) -> list[Task]:
        return list(self.tasks)

    def save_all(self, tasks: Iterable[Task]) -> None:
        self.tasks = list(tasks)
        self.saves += 1

    @contextlib.contextmanager
    def transaction(self) -> Iterator[list[Task]]:
        with self._lock:
            yield self.load_all()


@dataclass(slots=True)
class ApiCall:
    op: str
    args: tuple[Any, ...]


@dataclass
class FakeTaskApi:
    """
    In-memory TaskApi for mutation-protocol tests.

    Backed by a real TaskService so responses carry real ids and timestamps.
    - fail_next(op): the next call of `op` raises ApiError(500)
    - hold(): calls block until release(), so tests can observe in-flight state
    """

    service: TaskService
    calls: list[ApiCall] = field(default_factory=list)
    _failures: dict[str, list[Exception]] = field(default_factory=dict)
    _gate: asyncio.Event | None = None

    def fail_next(self, op: str, exc: Exception | None = None) -> None:
        self._failures.setdefault(op, []).append(exc or ApiError(500, "Cannot write task store"))

    def hold(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    def _call(self, op: str, fn, *args: Any) -> Awaitable[Any]:
        # Recorded, gated and failed at call time, like a request that is already on the wire.
        self.calls.append(ApiCall(op=op, args=args))
        pending = self._failures.get(op)
        failure = pending.pop(0) if pending else None
        return self._respond(self._gate, failure, fn, args)

    async def _respond(self, gate: asyncio.Event | None, failure: Exception | None, fn, args: tuple[Any, ...]) -> Any:
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if failure is not None:
            raise failure
        try:
            return fn(*args)
        except TaskBoardError as exc:
            raise ApiError(exc.status_code, str(exc)) from exc

    def ops(self) -> list[str]:
        return [c.op for c in self.calls]

    def list_tasks(self) -> Awaitable[list[Task]]:
        return self._call("list", self.service.list_tasks)

    def get_task(self, task_id: str) -> Awaitable[Task]:
        return self._call("get", self.service.get_task, task_id)

    def create_task(self, payload: dict[str, Any]) -> Awaitable[Task]:
        return self._call("create", self.service.create_task, payload)

    def update_task(self, task_id: str, patch: dict[str, Any]) -> Awaitable[Task]:
        return self._call("update", self.service.update_task, task_id, patch)

    def delete_task(self, task_id: str) -> Awaitable[None]:
        return self._call("delete", self.service.delete_task, task_id)

    def duplicate_task(self, task_id: str) -> Awaitable[Task]:
        return self._call("duplicate", self.service.duplicate_task, task_id)


class NotificationRecorder:
    """Notifier that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)
