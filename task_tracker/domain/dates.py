from __future__ import annotations

from datetime import datetime, timezone


def local_now() -> datetime:
    return datetime.now().astimezone()


def normalize_deadline(value: datetime) -> datetime:
    """Return ``value`` timezone-aware and truncated to whole milliseconds.

    Naive datetimes are read as local wall-clock time.
    """
    if value.tzinfo is None:
        value = value.astimezone()
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


def to_iso_instant(value: datetime) -> str:
    utc = value.astimezone(timezone.utc).replace(tzinfo=None)
    return utc.isoformat(timespec="milliseconds") + "Z"


def parse_iso_instant(text: str) -> datetime:
    return normalize_deadline(datetime.fromisoformat(text))
