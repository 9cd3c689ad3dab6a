# src/taskboard/server/app.py

"""
HTTP Task API.

A thin Flask mapping over TaskService: parse the JSON body, call the operation,
turn the result into a status code. Validation, id assignment and timestamps all
live in TaskService; errors are TaskBoardError subclasses mapped by one handler.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, Response, jsonify, request

from ..tasks.errors import StoreUnavailable, TaskBoardError
from ..tasks.task_service import TaskService

logger = logging.getLogger(__name__)


def _body() -> Any:
    # None for a missing or unparsable body; TaskService rejects it as InvalidInput.
    return request.get_json(silent=True)


def create_app(service: TaskService, *, cors_origin: str = "*") -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False  # keep the wire field order stable and readable

    @app.after_request
    def _cors(resp: Response) -> Response:
        resp.headers["Access-Control-Allow-Origin"] = cors_origin
        resp.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, DELETE, OPTIONS"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return resp

    @app.errorhandler(TaskBoardError)
    def _task_error(err: TaskBoardError):
        if isinstance(err, StoreUnavailable):
            # Store already logged the traceback; record which request hit it.
            logger.error("Store unavailable during %s %s: %s", request.method, request.path, err)
        else:
            logger.info("%s %s -> %d %s", request.method, request.path, err.status_code, err)
        return jsonify({"error": str(err)}), err.status_code

    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/api/tasks")
    def list_tasks():
        return jsonify([t.to_wire() for t in service.list_tasks()])

    @app.get("/api/tasks/<task_id>")
    def get_task(task_id: str):
        return jsonify(service.get_task(task_id).to_wire())

    @app.post("/api/tasks")
    def create_task():
        task = service.create_task(_body())
        return jsonify(task.to_wire()), 201

    @app.put("/api/tasks/<task_id>")
    def update_task(task_id: str):
        task = service.update_task(task_id, _body())
        return jsonify(task.to_wire())

    @app.delete("/api/tasks/<task_id>")
    def delete_task(task_id: str):
        service.delete_task(task_id)
        return "", 204

    @app.post("/api/tasks/<task_id>/duplicate")
    def duplicate_task(task_id: str):
        task = service.duplicate_task(task_id)
        return jsonify(task.to_wire()), 201

    return app
