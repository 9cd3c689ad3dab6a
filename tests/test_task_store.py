# tests/test_task_store.py

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from taskboard.tasks.errors import StoreUnavailable
from taskboard.tasks.task_service import TaskService
from taskboard.tasks.task_store import JsonTaskStore

from .fakes import FakeClock


def test_missing_file_starts_empty_and_is_created(tmp_path: Path) -> None:
    path = tmp_path / "data" / "tasks.json"
    store = JsonTaskStore(path)

    assert store.load_all() == []
    assert json.loads(path.read_text("utf-8")) == {"tasks": []}


def test_missing_file_with_seeding_writes_demo_board(tmp_path: Path) -> None:
    store = JsonTaskStore(tmp_path / "tasks.json", seed_demo=True)

    tasks = store.load_all()
    assert [t.id for t in tasks] == ["1", "2", "3", "4", "5"]
    assert {t.status.value for t in tasks} == {"todo", "in-progress", "in-review", "done"}
    # Seeding happens once; a second store sees the saved file.
    assert JsonTaskStore(tmp_path / "tasks.json", seed_demo=True).load_all() == tasks


def test_save_all_replaces_the_whole_document(tmp_path: Path) -> None:
    store = JsonTaskStore(tmp_path / "tasks.json")
    service = TaskService(store, clock=FakeClock())
    a = service.create_task({"title": "A"})
    service.create_task({"title": "B"})

    store.save_all([a])

    assert store.load_all() == [a]
    doc = json.loads(store.path.read_text("utf-8"))
    assert [t["title"] for t in doc["tasks"]] == ["A"]
    assert not list(tmp_path.glob("*.tmp"))


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        '{"items": []}',
        '{"tasks": [{"id": "1"}]}',
        '{"tasks": [{"id": "1", "title": "x", "status": "blocked", "priority": "low",'
        ' "createdAt": "2025-01-01T00:00:00Z", "updatedAt": "2025-01-01T00:00:00Z"}]}',
    ],
)
def test_unreadable_document_raises_store_unavailable(tmp_path: Path, content: str) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(content, "utf-8")

    with pytest.raises(StoreUnavailable):
        JsonTaskStore(path).load_all()


def test_write_failure_raises_store_unavailable(tmp_path: Path) -> None:
    store = JsonTaskStore(tmp_path / "tasks.json")
    store.load_all()
    # A directory where the temp file should go makes the write fail.
    (tmp_path / "tasks.json.tmp").mkdir()

    with pytest.raises(StoreUnavailable):
        store.save_all([])


def test_transaction_does_not_write_by_itself(tmp_path: Path) -> None:
    store = JsonTaskStore(tmp_path / "tasks.json")
    service = TaskService(store, clock=FakeClock())
    service.create_task({"title": "Keep me"})

    with store.transaction() as tasks:
        tasks.clear()

    assert [t.title for t in store.load_all()] == ["Keep me"]


def test_two_stores_on_one_file_lose_updates(tmp_path: Path) -> None:
    """
    Known limitation, not a guarantee: writers are only serialized inside one
    store object. Two stores that both load before either saves -> last write wins.
    """
    path = tmp_path / "tasks.json"
    first = JsonTaskStore(path)
    second = JsonTaskStore(path)
    seed = TaskService(first, clock=FakeClock()).create_task({"title": "Seed"})

    tasks_a = first.load_all()
    tasks_b = second.load_all()
    tasks_a.append(replace(seed, id="a", title="From A"))
    tasks_b.append(replace(seed, id="b", title="From B"))
    first.save_all(tasks_a)
    second.save_all(tasks_b)

    assert [t.title for t in JsonTaskStore(path).load_all()] == ["Seed", "From B"]
