# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.cli.bootstrap import create_client_state, create_server_app
from taskboard.client.cache import TaskCache
from taskboard.client.mutations import TaskMutator
from taskboard.core.state import ClientState
from taskboard.tasks.task_service import TaskService
from taskboard.tasks.task_store import JsonTaskStore

from .fakes import FakeClock, FakeTaskApi, InMemoryTaskRepo, NotificationRecorder


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the console client.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        data_dir=tmp_path,
        tasks_path=tmp_path / "tasks.json",
        seed_demo=False,
        cors_origin="*",
        api_base_url="http://testserver",
        request_timeout_seconds=1.0,
        app_mode="business",
        calendar_cell_capacity=2,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(settings: SimpleNamespace) -> JsonTaskStore:
    return JsonTaskStore(settings.tasks_path)


@pytest.fixture()
def service(store: JsonTaskStore, clock: FakeClock) -> TaskService:
    return TaskService(store, clock=clock)


@pytest.fixture()
def http(settings: SimpleNamespace):
    """Flask test client over a real JSON store in tmp_path."""
    app = create_server_app(settings=settings)
    app.config.update(TESTING=True)
    return app.test_client()


@pytest.fixture()
def fake_api(clock: FakeClock) -> FakeTaskApi:
    return FakeTaskApi(service=TaskService(InMemoryTaskRepo(), clock=clock))


@pytest.fixture()
def notes() -> NotificationRecorder:
    return NotificationRecorder()


@pytest.fixture()
def mutator(fake_api: FakeTaskApi, notes: NotificationRecorder) -> TaskMutator:
    return TaskMutator(TaskCache(), fake_api, notify=notes)


@pytest.fixture()
def client_state(
    settings: SimpleNamespace,
    fake_api: FakeTaskApi,
    notes: NotificationRecorder,
) -> ClientState:
    return create_client_state(settings=settings, api=fake_api, notify=notes)
