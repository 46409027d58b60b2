from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from task_tracker.domain.dates import parse_iso_instant, to_iso_instant
from task_tracker.domain.entities import TaskEntity
from task_tracker.domain.enums import Subject
from task_tracker.domain.errors import PersistenceError, ValidationError
from task_tracker.domain.validation import validate_name, validate_priority

from .storage import Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    tasks: list[TaskEntity] = field(default_factory=list)
    found: bool = False
    warning: str | None = None


class DecodeError(ValueError):
    pass


def _to_record(task: TaskEntity) -> dict[str, Any]:
    return {
        "id": task.id,
        "name": task.name,
        "subject": task.subject.value,
        "priority": task.priority,
        "deadline": to_iso_instant(task.deadline) if task.deadline else None,
        "isDone": task.is_done,
        "memo": task.memo,
    }


def _require(record: dict, key: str, kind: type) -> Any:
    value = record.get(key)
    # bool is an int subclass, keep it out of numeric fields
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DecodeError(f"field {key!r} must be {kind.__name__}, got {value!r}")
    return value


def _optional_text(record: dict, key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"field {key!r} must be str, got {value!r}")
    return value


def _from_record(record: Any) -> TaskEntity:
    if not isinstance(record, dict):
        raise DecodeError(f"task record must be an object, got {type(record).__name__}")

    deadline_raw = record.get("deadline")
    if deadline_raw is not None and not isinstance(deadline_raw, str):
        raise DecodeError(f"field 'deadline' must be a string or null, got {deadline_raw!r}")

    try:
        return TaskEntity(
            id=_require(record, "id", str),
            name=validate_name(_require(record, "name", str)),
            subject=Subject(_require(record, "subject", str)),
            priority=validate_priority(_require(record, "priority", int)),
            deadline=parse_iso_instant(deadline_raw) if deadline_raw is not None else None,
            is_done=_require(record, "isDone", bool),
            memo=_optional_text(record, "memo"),
        )
    except (ValueError, ValidationError) as exc:
        raise DecodeError(str(exc)) from exc


def encode_tasks(tasks: Sequence[TaskEntity]) -> bytes:
    payload = [_to_record(task) for task in tasks]
    return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")


def decode_tasks(raw: bytes) -> list[TaskEntity]:
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise DecodeError(f"expected a list of tasks, got {type(data).__name__}")

    tasks = [_from_record(record) for record in data]
    seen: set[str] = set()
    for task in tasks:
        if task.id in seen:
            raise DecodeError(f"duplicate task id {task.id!r}")
        seen.add(task.id)
    return tasks


class TaskPersistence:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def save(self, tasks: Sequence[TaskEntity]) -> None:
        payload = encode_tasks(tasks)
        self._storage.save(payload)
        logger.debug("Saved %s tasks (%s bytes)", len(tasks), len(payload))

    def load(self) -> LoadResult:
        try:
            raw = self._storage.load()
        except PersistenceError as exc:
            logger.warning("Task storage unreadable, starting empty: %s", exc)
            return LoadResult(found=True, warning=f"保存データを読み込めませんでした: {exc}")

        if raw is None:
            logger.info("No saved tasks found")
            return LoadResult(found=False)

        try:
            tasks = decode_tasks(raw)
        except DecodeError as exc:
            logger.warning("Saved tasks are corrupt, starting empty: %s", exc)
            self._keep_backup(raw)
            return LoadResult(found=True, warning=f"保存データが壊れています: {exc}")

        logger.info("Loaded %s tasks", len(tasks))
        return LoadResult(tasks=tasks, found=True)

    def _keep_backup(self, raw: bytes) -> None:
        backup = getattr(self._storage, "backup", None)
        if backup is None:
            return
        try:
            backup(raw)
        except PersistenceError:
            logger.exception("Could not back up corrupt task data")
