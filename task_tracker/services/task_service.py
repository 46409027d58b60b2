from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from task_tracker.config import Settings
from task_tracker.domain.dates import local_now
from task_tracker.domain.deadline import DeadlineStatus, classify
from task_tracker.domain.entities import TaskEntity, TaskStats
from task_tracker.domain.enums import Subject
from task_tracker.domain.errors import NotFoundError, PersistenceError
from task_tracker.domain.filters import ViewSpec
from task_tracker.domain.views import compute_stats, compute_view, group_by_day
from task_tracker.infra.db import init_db, make_engine, make_session_factory
from task_tracker.infra.persistence import LoadResult, TaskPersistence
from task_tracker.infra.repository import ChangeEvent, TaskRepository
from task_tracker.infra.storage import FileStorage, SqlStorage, Storage

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TaskService:
    def __init__(self, repo: TaskRepository, clock: Clock = local_now) -> None:
        self._repo = repo
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def start(self, seed_defaults: bool = False) -> LoadResult:
        """Load persisted tasks once; optionally seed a first-run task set.

        Seeding happens only when the storage slot did not exist at all, so a
        user who deleted every task does not get the defaults back.
        """
        first_start = not self._repo.is_loaded
        result = self._repo.load()
        if first_start and seed_defaults and not result.found:
            seeds = default_tasks(self.now())
            for data in seeds:
                self._repo.create_task(data)
            logger.info("Seeded %s default tasks", len(seeds))
        return result

    def subscribe(self, listener: Callable[[ChangeEvent], None]) -> Callable[[], None]:
        return self._repo.subscribe(listener)

    def list_tasks(self) -> list[TaskEntity]:
        return self._repo.list_tasks()

    def get_task(self, task_id: str) -> TaskEntity | None:
        return self._repo.get_task(task_id)

    def create_task(self, data: dict) -> TaskEntity:
        return self._repo.create_task(data)

    def update_task(self, task_id: str, data: dict) -> TaskEntity:
        return self._repo.update_task(task_id, data)

    def set_done(self, task_id: str, value: bool) -> None:
        self._repo.set_done(task_id, value)

    def toggle_done(self, task_id: str) -> bool:
        task = self._repo.get_task(task_id)
        if task is None:
            raise NotFoundError(task_id)
        self._repo.set_done(task_id, not task.is_done)
        return not task.is_done

    def delete_task(self, task_id: str) -> None:
        self._repo.delete_task(task_id)

    def remove_completed(self) -> int:
        return self._repo.remove_completed()

    def compute_view(self, spec: ViewSpec) -> list[TaskEntity]:
        return compute_view(self._repo.list_tasks(), spec, self.now())

    def compute_stats(self) -> TaskStats:
        return compute_stats(self._repo.list_tasks(), self.now())

    def classify(self, task: TaskEntity) -> DeadlineStatus | None:
        return classify(task.deadline, self.now())

    def calendar_days(self) -> dict[date, list[TaskEntity]]:
        return group_by_day(self._repo.list_tasks(), self.now().tzinfo)


def default_tasks(now: datetime) -> list[dict]:
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return [
        {
            "name": "レポート提出",
            "subject": Subject.INFORMATION,
            "priority": 4,
            "deadline": start_of_day + timedelta(days=2, hours=17),
            "memo": "",
        },
        {
            "name": "小テストの復習",
            "subject": Subject.ANALYSIS_1,
            "priority": 3,
            "deadline": start_of_day + timedelta(days=5, hours=9),
            "memo": "",
        },
        {
            "name": "教科書を読む",
            "subject": Subject.OTHER,
            "priority": 1,
            "deadline": None,
            "memo": "",
        },
    ]


def build_storage(settings: Settings) -> Storage:
    if settings.database_url:
        engine = make_engine(settings.database_url)
        try:
            init_db(engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot open database: {exc}") from exc
        logger.info("Using database storage slot %r", settings.storage_key)
        return SqlStorage(make_session_factory(engine), settings.storage_key)
    path = settings.resolve(settings.storage_path)
    logger.info("Using file storage %s", path)
    return FileStorage(path)


def build_service(settings: Settings, clock: Clock = local_now) -> TaskService:
    repo = TaskRepository(TaskPersistence(build_storage(settings)))
    return TaskService(repo, clock)
