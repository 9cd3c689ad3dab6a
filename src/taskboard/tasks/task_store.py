# src/taskboard/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path

from .errors import StoreUnavailable
from .task_models import Task, TaskPriority, TaskStatus, utc_now

logger = logging.getLogger(__name__)

COLLECTION_KEY = "tasks"


def demo_tasks() -> list[Task]:
    """Starter board written when a fresh store is created with seeding enabled."""
    now = utc_now()
    rows = [
        ("1", "Set up project structure", "Initialize the board app", TaskStatus.DONE, TaskPriority.HIGH, "john"),
        ("2", "Create API endpoints", "Design and implement REST API for tasks", TaskStatus.IN_PROGRESS, TaskPriority.HIGH, "jane"),
        ("3", "Write unit tests", None, TaskStatus.TODO, TaskPriority.MEDIUM, None),
        ("4", "Update documentation", None, TaskStatus.TODO, TaskPriority.LOW, "bob"),
        ("5", "Code review PR #42", None, TaskStatus.IN_REVIEW, TaskPriority.MEDIUM, "alice"),
    ]
    return [
        Task(
            id=tid,
            title=title,
            description=desc,
            status=status,
            priority=priority,
            assignee=assignee,
            created_at=now,
            updated_at=now,
        )
        for tid, title, desc, status, priority, assignee in rows
    ]


class JsonTaskStore:
    """
    JSON-file task store.

    The whole collection lives in one document, {"tasks": [...]}, and is read and
    written wholesale. There is no partial-update primitive: callers load, mutate
    an in-memory list and save it back.

    Thread-safety:
    - save_all writes a temp file and os.replace()s it, so readers never see a
      half-written document
    - transaction() holds a per-store lock around load-modify-save; two store
      objects (or processes) on the same file are not coordinated
    """

    def __init__(self, path: str | Path = "tasks.json", *, seed_demo: bool = False) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._seed_demo = seed_demo
        self._lock = threading.RLock()
        logger.info("JsonTaskStore ready path=%s seed_demo=%s", self._path, seed_demo)

    @property
    def path(self) -> Path:
        return self._path

    @contextlib.contextmanager
    def transaction(self) -> Iterator[list[Task]]:
        """
        Load the collection under the writer lock and yield it.

        The caller mutates the yielded list and calls save_all() itself; nothing is
        written implicitly, so a failed validation leaves the file untouched.
        """
        with self._lock:
            yield self.load_all()

    def load_all(self) -> list[Task]:
        with self._lock:
            if not self._path.exists():
                tasks = demo_tasks() if self._seed_demo else []
                logger.info("No task file at %s; initializing with %d task(s)", self._path, len(tasks))
                self.save_all(tasks)
                return tasks

            try:
                raw = self._path.read_text("utf-8")
                data = json.loads(raw)
            except (OSError, ValueError) as exc:
                logger.exception("Failed to read task file %s", self._path)
                raise StoreUnavailable(f"Cannot read task store: {exc}") from exc

            if not isinstance(data, dict) or not isinstance(data.get(COLLECTION_KEY), list):
                logger.error("Task file %s has no %r list", self._path, COLLECTION_KEY)
                raise StoreUnavailable("Task store document is malformed")

            try:
                return [Task.from_wire(rec) for rec in data[COLLECTION_KEY]]
            except (KeyError, TypeError, ValueError) as exc:
                logger.exception("Malformed task record in %s", self._path)
                raise StoreUnavailable(f"Task store holds a malformed record: {exc}") from exc

    def save_all(self, tasks: Iterable[Task]) -> None:
        doc = {COLLECTION_KEY: [t.to_wire() for t in tasks]}
        with self._lock:
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            try:
                tmp.write_text(json.dumps(doc, ensure_ascii=False, indent=2), "utf-8")
                os.replace(tmp, self._path)
            except OSError as exc:
                logger.exception("Failed to write task file %s", self._path)
                with contextlib.suppress(OSError):
                    tmp.unlink()
                raise StoreUnavailable(f"Cannot write task store: {exc}") from exc
        logger.debug("Saved %d task(s) to %s", len(doc[COLLECTION_KEY]), self._path)
