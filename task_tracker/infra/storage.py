from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from task_tracker.domain.errors import PersistenceError

from .models import StorageSlotModel

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "todos"


class Storage(Protocol):
    def load(self) -> bytes | None: ...

    def save(self, payload: bytes) -> None: ...


class MemoryStorage:
    def __init__(self, payload: bytes | None = None) -> None:
        self.payload = payload
        self.backups: list[bytes] = []

    def load(self) -> bytes | None:
        return self.payload

    def save(self, payload: bytes) -> None:
        self.payload = payload

    def backup(self, payload: bytes) -> None:
        self.backups.append(payload)


class FileStorage:
    """One storage slot per file. Writes go through a temp file and a rename."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> bytes | None:
        try:
            if not self.path.exists():
                return None
            return self.path.read_bytes()
        except OSError as exc:
            raise PersistenceError(f"Cannot read {self.path}: {exc}") from exc

    def save(self, payload: bytes) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(payload)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {self.path}: {exc}") from exc

    def backup(self, payload: bytes) -> None:
        backup_path = self.path.with_name(self.path.name + ".corrupt")
        try:
            backup_path.write_bytes(payload)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {backup_path}: {exc}") from exc
        logger.warning("Unreadable task data copied to %s", backup_path)


class SqlStorage:
    """Storage slot kept as a single row of the ``storage_slots`` table."""

    def __init__(self, session_factory: sessionmaker, key: str = DEFAULT_SLOT) -> None:
        self._session_factory = session_factory
        self.key = key

    def load(self) -> bytes | None:
        try:
            with self._session_factory() as session:
                slot = session.get(StorageSlotModel, self.key)
                return bytes(slot.payload) if slot else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot read slot {self.key!r}: {exc}") from exc

    def save(self, payload: bytes) -> None:
        self._write(self.key, payload)

    def backup(self, payload: bytes) -> None:
        self._write(f"{self.key}.corrupt", payload)
        logger.warning("Unreadable task data copied to slot %s.corrupt", self.key)

    def _write(self, key: str, payload: bytes) -> None:
        try:
            with self._session_factory() as session:
                slot = session.get(StorageSlotModel, key)
                if slot is None:
                    session.add(StorageSlotModel(key=key, payload=payload))
                else:
                    slot.payload = payload
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot write slot {key!r}: {exc}") from exc
