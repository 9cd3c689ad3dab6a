# src/taskboard/client/api_client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    """Non-2xx response (or an unreadable body) from the Task API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip() or resp.reason_phrase
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return resp.reason_phrase


def _make_timeout(timeout_s: float) -> httpx.Timeout:
    return httpx.Timeout(timeout_s, connect=min(5.0, timeout_s))


class HttpTaskApi:
    """
    Async client for /api/tasks.

    Transport errors (connection refused, timeouts) propagate as httpx.HTTPError;
    error statuses and malformed bodies raise ApiError. The mutation protocol
    treats both as "roll back".
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=_make_timeout(float(timeout_seconds)),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, *, json: Any = None) -> httpx.Response:
        resp = await self._client.request(method, path, json=json)
        logger.debug("%s %s -> %d", method, path, resp.status_code)
        if resp.is_error:
            raise ApiError(resp.status_code, _error_message(resp))
        return resp

    @staticmethod
    def _decode_task(resp: httpx.Response) -> Task:
        try:
            return Task.from_wire(resp.json())
        except (KeyError, TypeError, ValueError) as exc:
            raise ApiError(resp.status_code, f"Malformed task in response: {exc}") from exc

    async def list_tasks(self) -> list[Task]:
        resp = await self._request("GET", "/api/tasks")
        try:
            data = resp.json()
            if not isinstance(data, list):
                raise TypeError("expected a JSON array")
            return [Task.from_wire(rec) for rec in data]
        except (KeyError, TypeError, ValueError) as exc:
            raise ApiError(resp.status_code, f"Malformed task list in response: {exc}") from exc

    async def get_task(self, task_id: str) -> Task:
        return self._decode_task(await self._request("GET", f"/api/tasks/{task_id}"))

    async def create_task(self, payload: dict[str, Any]) -> Task:
        return self._decode_task(await self._request("POST", "/api/tasks", json=payload))

    async def update_task(self, task_id: str, patch: dict[str, Any]) -> Task:
        return self._decode_task(await self._request("PUT", f"/api/tasks/{task_id}", json=patch))

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/api/tasks/{task_id}")

    async def duplicate_task(self, task_id: str) -> Task:
        return self._decode_task(await self._request("POST", f"/api/tasks/{task_id}/duplicate"))
