from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import Subject


@dataclass(frozen=True)
class TaskEntity:
    id: str
    name: str
    subject: Subject
    priority: int
    deadline: Optional[datetime]
    is_done: bool = False
    memo: str = ""


@dataclass(frozen=True)
class TaskStats:
    total_count: int = 0
    uncompleted_count: int = 0
    due_today_count: int = 0
    due_next_7_days_count: int = 0
