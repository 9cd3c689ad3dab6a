# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (server and console client).
- Nothing is required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

AppMode = Literal["business", "personal"]


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# A local .env fills in anything the real environment leaves unset.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_mode(name: str, default: AppMode) -> AppMode:
    raw = _env(name, default).strip().lower()
    if raw == "business":
        return "business"
    if raw == "personal":
        return "personal"
    return default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- HTTP server ----
    host: str
    port: int
    cors_origin: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_path: Path
    seed_demo: bool

    # ---- Console client ----
    api_base_url: str
    request_timeout_seconds: float
    app_mode: AppMode
    calendar_cell_capacity: int

    @property
    def assignees_enabled(self) -> bool:
        # Assignees only make sense on a shared (business) board.
        return self.app_mode == "business"

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard") or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        host = _env(_k("HOST"), "127.0.0.1")
        port = _env_int(_k("PORT"), 3001)
        cors_origin = _env(_k("CORS_ORIGIN"), "*")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        tasks_path = _env_path(_k("TASKS_PATH"), data_dir / "tasks.json")
        seed_demo = _env_bool(_k("SEED_DEMO"), True)

        api_base_url = _env(_k("API_BASE_URL"), f"http://{host}:{port}")
        request_timeout_seconds = _env_float(_k("REQUEST_TIMEOUT_SECONDS"), 10.0)
        app_mode = _env_mode(_k("MODE"), "personal")
        calendar_cell_capacity = max(1, _env_int(_k("CALENDAR_CELL_CAPACITY"), 3))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            host=host,
            port=port,
            cors_origin=cors_origin,
            data_dir=data_dir,
            tasks_path=tasks_path,
            seed_demo=seed_demo,
            api_base_url=api_base_url,
            request_timeout_seconds=request_timeout_seconds,
            app_mode=app_mode,
            calendar_cell_capacity=calendar_cell_capacity,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
