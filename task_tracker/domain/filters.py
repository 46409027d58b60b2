from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .enums import ALL_SUBJECTS, SortOption, StatusFilter


@dataclass(frozen=True)
class ViewSpec:
    status: StatusFilter = StatusFilter.ALL
    subject: str = ALL_SUBJECTS
    search: str = ""
    sort: SortOption = SortOption.DEADLINE_ASC
    due_on: Optional[date] = None
