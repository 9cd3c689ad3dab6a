# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- ensures local (gitignored) directories exist,
- wires the JSON store and TaskService into the Flask app (server side),
- wires the HTTP client, cache and mutator into ClientState (console side).
"""

from __future__ import annotations

import logging

from flask import Flask

from ..client.api_client import HttpTaskApi
from ..client.cache import TaskCache
from ..client.mutations import TaskMutator
from ..config import get_settings
from ..core.ports import Notifier, TaskApi
from ..core.state import ClientState
from ..server.app import create_app
from ..tasks.task_service import TaskService
from ..tasks.task_store import JsonTaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_path.parent.mkdir(parents=True, exist_ok=True)


def create_server_app(*, settings=None) -> Flask:
    """
    Build the Flask app over the JSON store.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = JsonTaskStore(settings.tasks_path, seed_demo=bool(getattr(settings, "seed_demo", False)))
    service = TaskService(store)
    return create_app(service, cors_origin=getattr(settings, "cors_origin", "*"))


def create_client_state(
    *,
    settings=None,
    api: TaskApi | None = None,
    notify: Notifier | None = None,
) -> ClientState:
    """Wire the console client. `api` is injectable for tests; defaults to HttpTaskApi."""
    if settings is None:
        settings = get_settings()

    if api is None:
        api = HttpTaskApi(
            settings.api_base_url,
            timeout_seconds=float(getattr(settings, "request_timeout_seconds", 10.0)),
        )

    cache = TaskCache()
    mutator = TaskMutator(cache, api, notify=notify)
    logger.debug("Client state ready api=%s", getattr(settings, "api_base_url", "?"))
    return ClientState(settings=settings, api=api, cache=cache, mutator=mutator)
