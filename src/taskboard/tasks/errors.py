# src/taskboard/tasks/errors.py

from __future__ import annotations


class TaskBoardError(Exception):
    """Base class for task operation failures."""

    status_code = 500


class InvalidInput(TaskBoardError):
    """Missing or invalid field; the caller must correct and resubmit."""

    status_code = 400


class NotFound(TaskBoardError):
    """No task with the requested id."""

    status_code = 404

    def __init__(self, task_id: str) -> None:
        super().__init__("Task not found")
        self.task_id = task_id


class StoreUnavailable(TaskBoardError):
    """The persisted collection could not be read, parsed or written."""

    status_code = 500
