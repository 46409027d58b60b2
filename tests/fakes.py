from __future__ import annotations

from task_tracker.domain.errors import PersistenceError
from task_tracker.infra.storage import MemoryStorage


class FailingStorage(MemoryStorage):
    """Memory slot whose reads and writes can be switched to fail."""

    def __init__(self, payload: bytes | None = None) -> None:
        super().__init__(payload)
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    def load(self) -> bytes | None:
        if self.fail_reads:
            raise PersistenceError("device not ready")
        return super().load()

    def save(self, payload: bytes) -> None:
        self.writes += 1
        if self.fail_writes:
            raise PersistenceError("disk full")
        super().save(payload)


class SequentialIds:
    def __init__(self, prefix: str = "task") -> None:
        self.prefix = prefix
        self.counter = 0

    def __call__(self) -> str:
        self.counter += 1
        return f"{self.prefix}-{self.counter}"


class FixedClock:
    def __init__(self, now) -> None:
        self.now = now

    def __call__(self):
        return self.now
