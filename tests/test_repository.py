from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from task_tracker.domain.enums import Subject
from task_tracker.domain.errors import NotFoundError, TaskTrackerError, ValidationError
from task_tracker.domain.filters import ViewSpec
from task_tracker.domain.views import compute_view
from task_tracker.infra.persistence import TaskPersistence, decode_tasks
from task_tracker.infra.repository import ChangeAction, TaskRepository
from task_tracker.infra.storage import MemoryStorage

from fakes import SequentialIds


def test_create_task_applies_defaults(repo) -> None:
    task = repo.create_task({"name": "  宿題  "})

    assert task.name == "宿題"
    assert task.subject == Subject.OTHER
    assert task.priority == 3
    assert task.deadline is None
    assert task.is_done is False
    assert task.memo == ""
    assert repo.list_tasks() == [task]


@pytest.mark.parametrize("name", ["ab", "x" * 32, "漢字", "レポート提出", "👍👍"])
def test_create_accepts_names_within_bounds(repo, name) -> None:
    task = repo.create_task({"name": name})

    assert task.name == name


@pytest.mark.parametrize("name", ["", "a", " a ", "x" * 33, "あ" * 33, 42])
def test_create_rejects_invalid_names_without_changing_state(repo, storage, name) -> None:
    repo.create_task({"name": "existing"})
    writes = storage.writes
    snapshot = storage.payload

    with pytest.raises(ValidationError) as excinfo:
        repo.create_task({"name": name})

    assert excinfo.value.field == "name"
    assert len(repo.list_tasks()) == 1
    assert storage.writes == writes
    assert storage.payload == snapshot


@pytest.mark.parametrize(
    ("data", "field"),
    [
        ({"name": "ok name", "priority": 0}, "priority"),
        ({"name": "ok name", "priority": 6}, "priority"),
        ({"name": "ok name", "priority": True}, "priority"),
        ({"name": "ok name", "subject": "美術"}, "subject"),
        ({"name": "ok name", "deadline": "2025-01-01"}, "deadline"),
        ({"name": "ok name", "color": "red"}, "color"),
        ({"name": "ok name", "is_done": True}, "is_done"),
        ({"subject": Subject.OTHER}, "name"),
    ],
)
def test_create_rejects_invalid_fields(repo, data, field) -> None:
    with pytest.raises(ValidationError) as excinfo:
        repo.create_task(data)

    assert excinfo.value.field == field
    assert repo.list_tasks() == []


def test_created_ids_are_unique() -> None:
    repo = TaskRepository(TaskPersistence(MemoryStorage()))

    created = [repo.create_task({"name": f"task {index}"}) for index in range(50)]

    assert len({task.id for task in created}) == 50


def test_colliding_id_factory_is_retried() -> None:
    ids = iter(["dup", "dup", "fresh"])
    repo = TaskRepository(TaskPersistence(MemoryStorage()), id_factory=lambda: next(ids))

    first = repo.create_task({"name": "first"})
    second = repo.create_task({"name": "second"})

    assert (first.id, second.id) == ("dup", "fresh")


def test_id_factory_that_never_yields_a_fresh_id_fails() -> None:
    repo = TaskRepository(TaskPersistence(MemoryStorage()), id_factory=lambda: "same")
    repo.create_task({"name": "first"})

    with pytest.raises(TaskTrackerError):
        repo.create_task({"name": "second"})
    assert len(repo.list_tasks()) == 1


def test_naive_deadline_is_stored_aware_and_truncated_to_milliseconds(repo) -> None:
    task = repo.create_task({"name": "deadline", "deadline": datetime(2025, 3, 1, 9, 30, 0, 123456)})

    assert task.deadline.tzinfo is not None
    assert task.deadline.microsecond == 123000


def test_update_merges_patch_and_keeps_position(repo) -> None:
    first = repo.create_task({"name": "first", "priority": 2})
    repo.create_task({"name": "second"})
    deadline = datetime(2025, 2, 1, 10, 0, tzinfo=timezone.utc)

    updated = repo.update_task(first.id, {"priority": 5, "deadline": deadline, "memo": "p.12"})

    assert updated.name == "first"
    assert updated.priority == 5
    assert updated.deadline == deadline
    assert updated.memo == "p.12"
    assert [task.name for task in repo.list_tasks()] == ["first", "second"]


def test_update_can_clear_deadline(repo) -> None:
    task = repo.create_task({"name": "dated", "deadline": datetime(2025, 2, 1, tzinfo=timezone.utc)})

    assert repo.update_task(task.id, {"deadline": None}).deadline is None


def test_update_revalidates_name_only_when_patched(repo) -> None:
    task = repo.create_task({"name": "valid"})

    with pytest.raises(ValidationError):
        repo.update_task(task.id, {"name": "x"})
    assert repo.get_task(task.id).name == "valid"

    assert repo.update_task(task.id, {"memo": "no name here"}).name == "valid"


def test_update_rejects_id_change(repo) -> None:
    task = repo.create_task({"name": "valid"})

    with pytest.raises(ValidationError):
        repo.update_task(task.id, {"id": "other"})
    assert repo.get_task(task.id) is not None


def test_update_unknown_id_raises_not_found(repo, storage) -> None:
    repo.create_task({"name": "valid"})
    writes = storage.writes

    with pytest.raises(NotFoundError) as excinfo:
        repo.update_task("missing", {"name": "whatever"})

    assert excinfo.value.task_id == "missing"
    assert storage.writes == writes


def test_set_done_is_idempotent(repo) -> None:
    task = repo.create_task({"name": "toggle me"})

    repo.set_done(task.id, True)
    repo.set_done(task.id, True)

    assert repo.get_task(task.id).is_done is True
    repo.set_done(task.id, False)
    assert repo.get_task(task.id).is_done is False


def test_set_done_and_delete_unknown_id_raise_not_found(repo) -> None:
    with pytest.raises(NotFoundError):
        repo.set_done("missing", True)
    with pytest.raises(NotFoundError):
        repo.delete_task("missing")


def test_delete_removes_task(repo) -> None:
    keep = repo.create_task({"name": "keep"})
    drop = repo.create_task({"name": "drop"})

    repo.delete_task(drop.id)

    assert repo.list_tasks() == [keep]
    assert repo.get_task(drop.id) is None


def test_remove_completed_returns_count_and_keeps_open_tasks(repo) -> None:
    done_a = repo.create_task({"name": "done a"})
    open_task = repo.create_task({"name": "open"})
    done_b = repo.create_task({"name": "done b"})
    repo.set_done(done_a.id, True)
    repo.set_done(done_b.id, True)

    removed = repo.remove_completed()

    assert removed == 2
    assert [task.id for task in repo.list_tasks()] == [open_task.id]


def test_remove_completed_with_nothing_done_returns_zero(repo) -> None:
    repo.create_task({"name": "open"})

    assert repo.remove_completed() == 0
    assert len(repo.list_tasks()) == 1


def test_every_mutation_writes_the_whole_collection(repo, storage) -> None:
    first = repo.create_task({"name": "first"})
    repo.create_task({"name": "second"})
    repo.set_done(first.id, True)

    persisted = decode_tasks(storage.payload)

    assert persisted == repo.list_tasks()
    assert storage.writes == 3


def test_failed_write_keeps_memory_state_and_reports_error(repo, storage) -> None:
    events = []
    repo.subscribe(events.append)
    storage.fail_writes = True

    task = repo.create_task({"name": "unsaved"})

    assert repo.list_tasks() == [task]
    assert repo.last_persistence_error is not None
    assert events[-1].persistence_error is repo.last_persistence_error

    storage.fail_writes = False
    repo.set_done(task.id, True)
    assert repo.last_persistence_error is None
    assert decode_tasks(storage.payload)[0].is_done is True


def test_subscribers_get_change_events_after_commit(repo) -> None:
    events = []
    unsubscribe = repo.subscribe(events.append)

    task = repo.create_task({"name": "observed"})
    repo.update_task(task.id, {"priority": 4})
    repo.set_done(task.id, True)
    repo.remove_completed()

    assert [event.action for event in events] == [
        ChangeAction.LOADED,
        ChangeAction.CREATED,
        ChangeAction.UPDATED,
        ChangeAction.DONE_CHANGED,
        ChangeAction.COMPLETED_REMOVED,
    ]
    assert events[1].tasks == (task,)
    assert events[-1].task_ids == (task.id,)
    assert events[-1].tasks == ()

    unsubscribe()
    repo.create_task({"name": "unobserved"})
    assert len(events) == 5


def test_broken_listener_does_not_fail_mutation_or_starve_others(repo, storage) -> None:
    def broken(event) -> None:
        raise RuntimeError("listener bug")

    events = []
    repo.subscribe(broken)
    repo.subscribe(events.append)

    task = repo.create_task({"name": "report"})

    assert repo.list_tasks() == [task]
    assert storage.writes == 1
    assert [event.action for event in events] == [ChangeAction.LOADED, ChangeAction.CREATED]


def test_failed_validation_does_not_notify(repo) -> None:
    repo.load()
    events = []
    repo.subscribe(events.append)

    with pytest.raises(ValidationError):
        repo.create_task({"name": "x"})

    assert events == []


def test_load_happens_once_and_before_first_write() -> None:
    storage = MemoryStorage()
    seed = TaskRepository(TaskPersistence(storage), id_factory=SequentialIds("old"))
    seed.create_task({"name": "persisted"})

    repo = TaskRepository(TaskPersistence(storage), id_factory=SequentialIds("new"))
    repo.create_task({"name": "added later"})

    assert [task.name for task in repo.list_tasks()] == ["persisted", "added later"]
    assert repo.load() is repo.load()


def test_removed_task_disappears_from_views(repo, now) -> None:
    task = repo.create_task({"name": "gone soon", "deadline": now + timedelta(hours=1)})
    repo.delete_task(task.id)

    assert compute_view(repo.list_tasks(), ViewSpec(), now) == []
