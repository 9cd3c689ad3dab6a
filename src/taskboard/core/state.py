# src/taskboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..client.cache import TaskCache
from ..client.mutations import TaskMutator
from ..client.views import TaskFilter
from .ports import TaskApi


@dataclass
class ClientState:
    """
    Everything the console client works on.

    The cache is owned here and threaded through command handlers; there is no
    module-level task list.
    """

    settings: Any
    api: TaskApi
    cache: TaskCache
    mutator: TaskMutator

    task_filter: TaskFilter = field(default_factory=TaskFilter)
    sort_field: str = "title"
    sort_direction: str = "asc"

    @property
    def assignees_enabled(self) -> bool:
        return getattr(self.settings, "app_mode", "personal") == "business"
