from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

from task_tracker.domain.entities import TaskEntity
from task_tracker.domain.enums import PriorityLevel, Subject
from task_tracker.domain.errors import (
    NotFoundError,
    PersistenceError,
    TaskTrackerError,
    ValidationError,
)
from task_tracker.domain.validation import (
    validate_deadline,
    validate_memo,
    validate_name,
    validate_priority,
    validate_subject,
)

from .persistence import LoadResult, TaskPersistence

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = PriorityLevel.MEDIUM.value
DEFAULT_SUBJECT = Subject.OTHER

_VALIDATORS: dict[str, Callable[[Any], Any]] = {
    "name": validate_name,
    "subject": validate_subject,
    "priority": validate_priority,
    "deadline": validate_deadline,
    "memo": validate_memo,
}
_EDITABLE_FIELDS = frozenset(_VALIDATORS) | {"is_done"}
_ID_ATTEMPTS = 8


class ChangeAction(StrEnum):
    LOADED = "loaded"
    CREATED = "created"
    UPDATED = "updated"
    DONE_CHANGED = "done_changed"
    DELETED = "deleted"
    COMPLETED_REMOVED = "completed_removed"


@dataclass(frozen=True)
class ChangeEvent:
    action: ChangeAction
    task_ids: tuple[str, ...]
    tasks: tuple[TaskEntity, ...]
    persistence_error: PersistenceError | None = None


Listener = Callable[[ChangeEvent], None]


def _new_id() -> str:
    return str(uuid.uuid4())


def _validate_fields(data: dict) -> dict[str, Any]:
    unknown = set(data) - _EDITABLE_FIELDS
    if unknown:
        raise ValidationError(sorted(unknown)[0], f"Unknown task fields: {', '.join(sorted(unknown))}")

    cleaned = {key: _VALIDATORS[key](value) for key, value in data.items() if key in _VALIDATORS}
    if "is_done" in data:
        if not isinstance(data["is_done"], bool):
            raise ValidationError("is_done", f"is_done must be a bool, got {data['is_done']!r}")
        cleaned["is_done"] = data["is_done"]
    return cleaned


class TaskRepository:
    """Owns the task collection and is the only code that mutates it.

    Every successful mutation commits in memory, writes the whole collection
    through the persistence adapter and then notifies subscribers. A failed
    write is logged and reported on the change event; the in-memory state is
    kept.

    Reads and writes both load the persisted collection first, once, so a
    mutation can never overwrite data that was not read yet.
    """

    def __init__(
        self,
        persistence: TaskPersistence,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._persistence = persistence
        self._id_factory = id_factory
        self._tasks: list[TaskEntity] = []
        self._listeners: list[Listener] = []
        self._load_result: LoadResult | None = None
        self.last_persistence_error: PersistenceError | None = None

    @property
    def is_loaded(self) -> bool:
        return self._load_result is not None

    def load(self) -> LoadResult:
        if self._load_result is not None:
            return self._load_result
        result = self._persistence.load()
        self._tasks = list(result.tasks)
        self._load_result = result
        self._emit(ChangeAction.LOADED, tuple(task.id for task in self._tasks))
        return result

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def list_tasks(self) -> list[TaskEntity]:
        self.load()
        return list(self._tasks)

    def get_task(self, task_id: str) -> TaskEntity | None:
        self.load()
        return next((task for task in self._tasks if task.id == task_id), None)

    def create_task(self, data: dict) -> TaskEntity:
        self.load()
        if "name" not in data:
            raise ValidationError("name", "Task name is required")
        if "is_done" in data:
            raise ValidationError("is_done", "New tasks always start as not done")
        fields = _validate_fields(data)

        task = TaskEntity(
            id=self._allocate_id(),
            name=fields["name"],
            subject=fields.get("subject", DEFAULT_SUBJECT),
            priority=fields.get("priority", DEFAULT_PRIORITY),
            deadline=fields.get("deadline"),
            is_done=False,
            memo=fields.get("memo", ""),
        )
        self._tasks.append(task)
        logger.info("Created task %s %r", task.id, task.name)
        self._commit(ChangeAction.CREATED, (task.id,))
        return task

    def update_task(self, task_id: str, patch: dict) -> TaskEntity:
        if "id" in patch:
            raise ValidationError("id", "Task id cannot be changed")
        index = self._index_of(task_id)
        fields = _validate_fields(patch)

        updated = replace(self._tasks[index], **fields)
        self._tasks[index] = updated
        logger.info("Updated task %s fields=%s", task_id, sorted(fields))
        self._commit(ChangeAction.UPDATED, (task_id,))
        return updated

    def set_done(self, task_id: str, value: bool) -> None:
        index = self._index_of(task_id)
        self._tasks[index] = replace(self._tasks[index], is_done=bool(value))
        logger.info("Task %s done=%s", task_id, bool(value))
        self._commit(ChangeAction.DONE_CHANGED, (task_id,))

    def delete_task(self, task_id: str) -> None:
        index = self._index_of(task_id)
        del self._tasks[index]
        logger.info("Deleted task %s", task_id)
        self._commit(ChangeAction.DELETED, (task_id,))

    def remove_completed(self) -> int:
        self.load()
        removed = tuple(task.id for task in self._tasks if task.is_done)
        self._tasks = [task for task in self._tasks if not task.is_done]
        logger.info("Removed %s completed tasks", len(removed))
        self._commit(ChangeAction.COMPLETED_REMOVED, removed)
        return len(removed)

    def _index_of(self, task_id: str) -> int:
        self.load()
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        raise NotFoundError(task_id)

    def _allocate_id(self) -> str:
        existing = {task.id for task in self._tasks}
        for _ in range(_ID_ATTEMPTS):
            task_id = self._id_factory()
            if task_id not in existing:
                return task_id
        raise TaskTrackerError("Id factory keeps returning ids that are already taken")

    def _commit(self, action: ChangeAction, task_ids: tuple[str, ...]) -> None:
        error = None
        try:
            self._persistence.save(self._tasks)
        except PersistenceError as exc:
            logger.exception("Saving tasks failed; keeping in-memory state")
            error = exc
        self.last_persistence_error = error
        self._emit(action, task_ids, error)

    def _emit(
        self,
        action: ChangeAction,
        task_ids: tuple[str, ...],
        error: PersistenceError | None = None,
    ) -> None:
        event = ChangeEvent(action, task_ids, tuple(self._tasks), error)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Change listener %r failed on %s", listener, action)
