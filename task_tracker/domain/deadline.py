from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .enums import Urgency

DUE_SOON_WINDOW = timedelta(hours=24)
_HOUR = timedelta(hours=1)
_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DeadlineStatus:
    urgency: Urgency
    label: str
    remaining: timedelta


def classify(deadline: Optional[datetime], now: datetime) -> DeadlineStatus | None:
    """Map a deadline to its urgency category and remaining-time label.

    Overdue only when strictly past (``deadline == now`` is still due soon);
    due soon while strictly less than 24 hours remain. Hours round up,
    days round down.
    """
    if deadline is None:
        return None

    remaining = deadline - now
    if remaining < timedelta(0):
        return DeadlineStatus(Urgency.OVERDUE, "期限超過", remaining)
    if remaining < DUE_SOON_WINDOW:
        hours = -(-remaining // _HOUR)
        return DeadlineStatus(Urgency.DUE_SOON, f"残り{hours}時間", remaining)
    days = remaining // _DAY
    return DeadlineStatus(Urgency.UPCOMING, f"残り{days}日", remaining)


def is_overdue(deadline: Optional[datetime], now: datetime) -> bool:
    return deadline is not None and deadline < now


def priority_stars(priority: int) -> str:
    return "★" * priority
