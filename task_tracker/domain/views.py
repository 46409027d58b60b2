from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, tzinfo

from .deadline import is_overdue
from .entities import TaskEntity, TaskStats
from .enums import ALL_SUBJECTS, SortOption, StatusFilter
from .filters import ViewSpec

UPCOMING_WINDOW = timedelta(days=7)


def _matches_status(task: TaskEntity, status: StatusFilter, now: datetime) -> bool:
    if status == StatusFilter.ACTIVE:
        return not task.is_done and not is_overdue(task.deadline, now)
    if status == StatusFilter.COMPLETED:
        return task.is_done
    if status == StatusFilter.OVERDUE:
        return not task.is_done and is_overdue(task.deadline, now)
    return True


def _apply_filters(
    tasks: Iterable[TaskEntity], spec: ViewSpec, now: datetime
) -> list[TaskEntity]:
    needle = spec.search.strip().casefold()
    visible = []
    for task in tasks:
        if not _matches_status(task, spec.status, now):
            continue
        if spec.subject != ALL_SUBJECTS and task.subject != spec.subject:
            continue
        if needle and needle not in task.name.casefold():
            continue
        if spec.due_on is not None and (
            task.deadline is None or _local_day(task.deadline, now.tzinfo) != spec.due_on
        ):
            continue
        visible.append(task)
    return visible


def _sort(tasks: list[TaskEntity], option: SortOption) -> list[TaskEntity]:
    if option == SortOption.PRIORITY_HIGH:
        return sorted(tasks, key=lambda task: -task.priority)
    if option == SortOption.PRIORITY_LOW:
        return sorted(tasks, key=lambda task: task.priority)

    dated = [task for task in tasks if task.deadline is not None]
    undated = [task for task in tasks if task.deadline is None]
    # sorted() is stable for reverse=True as well, ties keep insertion order
    dated.sort(key=lambda task: task.deadline, reverse=option == SortOption.DEADLINE_DESC)
    return dated + undated


def compute_view(
    tasks: Sequence[TaskEntity], spec: ViewSpec, now: datetime
) -> list[TaskEntity]:
    return _sort(_apply_filters(tasks, spec, now), spec.sort)


def compute_stats(tasks: Sequence[TaskEntity], now: datetime) -> TaskStats:
    today = now.date()
    horizon = now + UPCOMING_WINDOW
    due_today = 0
    due_next_7_days = 0
    for task in tasks:
        if task.deadline is None:
            continue
        if _local_day(task.deadline, now.tzinfo) == today:
            due_today += 1
        if now < task.deadline < horizon:
            due_next_7_days += 1

    return TaskStats(
        total_count=len(tasks),
        uncompleted_count=sum(1 for task in tasks if not task.is_done),
        due_today_count=due_today,
        due_next_7_days_count=due_next_7_days,
    )


def group_by_day(
    tasks: Sequence[TaskEntity], tz: tzinfo | None = None
) -> dict[date, list[TaskEntity]]:
    """Bucket tasks with a deadline by the local calendar day they fall on."""
    days: dict[date, list[TaskEntity]] = {}
    dated = sorted(
        (task for task in tasks if task.deadline is not None),
        key=lambda task: task.deadline,
    )
    for task in dated:
        days.setdefault(_local_day(task.deadline, tz), []).append(task)
    return days


def _local_day(moment: datetime, tz: tzinfo | None) -> date:
    return moment.astimezone(tz).date()
