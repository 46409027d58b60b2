from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from task_tracker.infra.persistence import TaskPersistence
from task_tracker.infra.repository import TaskRepository

from fakes import FailingStorage, SequentialIds

JST = timezone(timedelta(hours=9))


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 1, 15, 12, 0, tzinfo=JST)


@pytest.fixture
def storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def repo(storage: FailingStorage) -> TaskRepository:
    return TaskRepository(TaskPersistence(storage), id_factory=SequentialIds())
