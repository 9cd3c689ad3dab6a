# src/taskboard/client/mutations.py

from __future__ import annotations

"""
Optimistic mutation protocol.

Every mutation runs through one MutationTransaction:
- snapshot the cache entries the mutation touches,
- apply the change locally right away (the UI sees it with zero latency),
- dispatch the API call in the background,
- commit (reconcile with the server's answer) or roll back those entries.

A rollback never touches other tasks, so mutations on different tasks stay
independent whichever order they finish in.
Same-task mutations are NOT serialized. If a second mutation on a task starts
while the first is still in flight, the first one's rollback restores its own
snapshot and may clobber the second's optimistic change.
Accepted as is; see test_mutations.py.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, TypeVar

from ..core.ports import Notifier, TaskApi
from ..tasks.task_models import (
    MUTABLE_FIELDS,
    PROVISIONAL_ID_PREFIX,
    Task,
    TaskPriority,
    TaskStatus,
    date_key,
    is_date_key,
    utc_now,
)
from .cache import TaskCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TxState(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class MutationTransaction:
    """
    snapshot -> apply -> commit | rollback, over one TaskCache.

    The snapshot covers only `task_ids`, the entries this mutation touches:
    their position and value before apply(). rollback() puts exactly those back
    (drops entries that did not exist, re-inserts removed ones, restores patched
    ones) and leaves every other task as it is now.
    """

    def __init__(self, cache: TaskCache, label: str, task_ids: Iterable[str] = ()) -> None:
        self._cache = cache
        self.label = label
        self.state = TxState.PENDING
        self._task_ids = tuple(task_ids)
        self._saved: list[tuple[str, int, Task | None]] = []

    def apply(self, change: Callable[[TaskCache], None]) -> None:
        if self.state is not TxState.PENDING:
            raise RuntimeError(f"transaction {self.label!r} already {self.state.value}")
        for task_id in self._task_ids:
            index = self._cache.index_of(task_id)
            saved = self._cache.get(task_id) if index is not None else None
            self._saved.append((task_id, index if index is not None else len(self._cache), saved))
        change(self._cache)
        self.state = TxState.APPLIED

    def commit(self, reconcile: Callable[[TaskCache], None] | None = None) -> None:
        if self.state is not TxState.APPLIED:
            raise RuntimeError(f"cannot commit {self.label!r} in state {self.state.value}")
        if reconcile is not None:
            reconcile(self._cache)
        self.state = TxState.COMMITTED

    def rollback(self) -> None:
        if self.state is not TxState.APPLIED:
            raise RuntimeError(f"cannot roll back {self.label!r} in state {self.state.value}")
        for task_id, index, saved in reversed(self._saved):
            if saved is None:
                self._cache.remove(task_id)
            elif not self._cache.replace(task_id, saved):
                self._cache.insert(index, saved)
        self.state = TxState.ROLLED_BACK


def _log_notify(message: str) -> None:
    logger.warning("%s", message)


def _to_date_key(day: str | date | None) -> str | None:
    if day is None or day == "":
        return None
    if isinstance(day, datetime):
        day = day.date()
    if isinstance(day, date):
        return date_key(day)
    if not is_date_key(day):
        raise ValueError(f"invalid date key: {day!r}")
    return day


def _local_changes(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Wire-keyed patch -> Task attribute changes, with the server's update rules."""
    changes: dict[str, Any] = {}
    for wire_name, raw in patch.items():
        attr = MUTABLE_FIELDS.get(wire_name)
        if attr is None:
            raise ValueError(f"unknown field: {wire_name}")
        if wire_name == "title":
            if not isinstance(raw, str) or not raw.strip():
                raise ValueError("title must not be empty")
            changes[attr] = raw.strip()
        elif wire_name == "status":
            changes[attr] = TaskStatus(raw)
        elif wire_name == "priority":
            changes[attr] = TaskPriority(raw)
        elif wire_name == "dueDate":
            changes[attr] = _to_date_key(raw)
        else:
            changes[attr] = raw if raw else None
    return changes


class TaskMutator:
    """
    Create / update / delete / move against the cache and the API.

    Mutating methods apply the change synchronously and return an asyncio.Task
    for the dispatch + reconcile; callers may await it or let it run. They return
    None when nothing was dispatched (no-op move, invalid input, unknown task).
    Must be called from a running event loop.
    """

    def __init__(
        self,
        cache: TaskCache,
        api: TaskApi,
        *,
        notify: Notifier | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.cache = cache
        self._api = api
        self._notify = notify or _log_notify
        self._clock = clock
        self._inflight: set[asyncio.Task[Any]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._inflight)

    async def drain(self) -> None:
        """Wait for every dispatched mutation to reconcile."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight))

    async def refresh(self) -> bool:
        """Rebuild the cache wholesale from the List operation."""
        try:
            tasks = await self._api.list_tasks()
        except Exception as exc:
            logger.warning("Failed to load tasks: %s", exc)
            self._notify(f"Failed to load tasks: {exc}")
            return False
        self.cache.replace_all(tasks)
        logger.info("Loaded %d task(s)", len(tasks))
        return True

    # ---- protocol core ----

    def _dispatch(
        self,
        tx: MutationTransaction,
        call: Awaitable[T],
        *,
        on_success: Callable[[TaskCache, T], None] | None = None,
        result: Callable[[T], Any] = lambda _: True,
        failed: Any = False,
        failure: str,
    ) -> asyncio.Task[Any]:
        async def run() -> Any:
            try:
                value = await call
            except Exception as exc:
                if tx.state is TxState.APPLIED:
                    tx.rollback()
                logger.warning("%s failed: %s", tx.label, exc)
                self._notify(f"{failure}: {exc}")
                return failed
            try:
                if tx.state is TxState.APPLIED:
                    tx.commit((lambda c: on_success(c, value)) if on_success else None)
                elif on_success is not None:
                    on_success(self.cache, value)
            except Exception as exc:
                # Saved on the server; only the local view is off until the next reload.
                logger.exception("%s: reconcile failed", tx.label)
                self._notify(f"{failure} locally: {exc}. Use /reload to resync.")
                return failed
            logger.debug("%s committed", tx.label)
            return result(value)

        pending = asyncio.ensure_future(run())
        self._inflight.add(pending)
        pending.add_done_callback(self._inflight.discard)
        return pending

    def _refuse(self, message: str) -> None:
        logger.info("Mutation refused: %s", message)
        self._notify(message)

    def _confirmed(self, task_id: str) -> Task | None:
        task = self.cache.get(task_id)
        if task is None:
            self._refuse(f"Task {task_id} not found")
            return None
        if task.is_provisional:
            self._refuse(f"Task {task_id} is still being saved")
            return None
        return task

    # ---- operations ----

    def create(self, draft: Mapping[str, Any]) -> asyncio.Task[Task | None] | None:
        title = str(draft.get("title") or "").strip()
        if not title:
            self._refuse("Title is required")
            return None
        try:
            priority = TaskPriority(draft.get("priority") or TaskPriority.MEDIUM)
            due_date = _to_date_key(draft.get("dueDate"))
        except ValueError as exc:
            self._refuse(f"Invalid task: {exc}")
            return None

        now = self._clock()
        provisional = Task(
            id=f"{PROVISIONAL_ID_PREFIX}{uuid.uuid4().hex}",
            title=title,
            description=draft.get("description") or None,
            status=TaskStatus.TODO,
            priority=priority,
            assignee=draft.get("assignee") or None,
            due_date=due_date,
            created_at=now,
            updated_at=now,
        )
        payload: dict[str, Any] = {"title": title, "priority": priority.value}
        if provisional.description:
            payload["description"] = provisional.description
        if provisional.assignee:
            payload["assignee"] = provisional.assignee
        if due_date:
            payload["dueDate"] = due_date

        tx = MutationTransaction(self.cache, f"create {provisional.id}", [provisional.id])
        tx.apply(lambda c: c.append(provisional))

        def swap_in(c: TaskCache, created: Task) -> None:
            if not c.replace(provisional.id, created):
                # Provisional entry vanished (an unrelated rollback); keep the server's task.
                c.append(created)

        return self._dispatch(
            tx,
            self._api.create_task(payload),
            on_success=swap_in,
            result=lambda created: created,
            failed=None,
            failure="Failed to create task",
        )

    def update(self, task_id: str, patch: Mapping[str, Any]) -> asyncio.Task[bool] | None:
        current = self._confirmed(task_id)
        if current is None:
            return None
        try:
            changes = _local_changes(patch)
        except ValueError as exc:
            self._refuse(f"Invalid update: {exc}")
            return None

        wire_patch = dict(patch)
        if "dueDate" in changes:
            wire_patch["dueDate"] = changes["due_date"]
        now = max(self._clock(), current.updated_at)

        tx = MutationTransaction(self.cache, f"update {task_id}", [task_id])
        tx.apply(lambda c: c.patch(task_id, **changes, updated_at=now))

        def resync(c: TaskCache, saved: Task) -> None:
            if c.get(task_id) is not None:
                c.patch(task_id, updated_at=saved.updated_at)

        return self._dispatch(
            tx,
            self._api.update_task(task_id, wire_patch),
            on_success=resync,
            failure="Failed to update task",
        )

    def delete(self, task_id: str) -> asyncio.Task[bool] | None:
        if self._confirmed(task_id) is None:
            return None
        tx = MutationTransaction(self.cache, f"delete {task_id}", [task_id])
        tx.apply(lambda c: c.remove(task_id))
        return self._dispatch(tx, self._api.delete_task(task_id), failure="Failed to delete task")

    def move_to_status(self, task_id: str, status: TaskStatus | str) -> asyncio.Task[bool] | None:
        """Drop onto a status column: an update carrying only `status`."""
        current = self.cache.get(task_id)
        if current is None:
            self._refuse(f"Task {task_id} not found")
            return None
        try:
            target = TaskStatus(status)
        except ValueError:
            self._refuse(f"Invalid status: {status}")
            return None
        if current.status == target:
            return None
        return self.update(task_id, {"status": target.value})

    def move_to_date(self, task_id: str, day: str | date | None) -> asyncio.Task[bool] | None:
        """Drop onto a calendar day: an update carrying only `dueDate`."""
        current = self.cache.get(task_id)
        if current is None:
            self._refuse(f"Task {task_id} not found")
            return None
        try:
            target = _to_date_key(day)
        except ValueError:
            self._refuse(f"Invalid date: {day}")
            return None
        if current.due_date == target:
            return None
        return self.update(task_id, {"dueDate": target})

    def duplicate(self, task_id: str) -> asyncio.Task[Task | None] | None:
        """
        Not optimistic: the server picks the "(n)" title, so the copy is appended
        only once it exists.
        """
        if self._confirmed(task_id) is None:
            return None
        # Never applied, so a failure has nothing to roll back.
        tx = MutationTransaction(self.cache, f"duplicate {task_id}")
        return self._dispatch(
            tx,
            self._api.duplicate_task(task_id),
            on_success=lambda c, copy: c.append(copy),
            result=lambda copy: copy,
            failed=None,
            failure="Failed to duplicate task",
        )
