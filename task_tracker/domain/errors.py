from __future__ import annotations


class TaskTrackerError(Exception):
    """Base class for every error raised by the task engine."""


class ValidationError(TaskTrackerError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(TaskTrackerError, LookupError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id!r} does not exist")
        self.task_id = task_id


class PersistenceError(TaskTrackerError):
    """Storage read or write failed. In-memory state stays authoritative."""
