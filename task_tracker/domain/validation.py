from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from .dates import normalize_deadline
from .enums import PriorityLevel, Subject
from .errors import ValidationError

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 32
PRIORITY_MIN = PriorityLevel.LOWEST.value
PRIORITY_MAX = PriorityLevel.HIGHEST.value


def validate_name(value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError("name", "名前は文字列で入力してください。")
    name = value.strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValidationError(
            "name",
            f"名前は{NAME_MIN_LENGTH}文字以上{NAME_MAX_LENGTH}文字以内で入力してください。",
        )
    return name


def validate_subject(value: Any) -> Subject:
    try:
        return Subject(value)
    except ValueError:
        raise ValidationError("subject", f"未知の科目です: {value!r}") from None


def validate_priority(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("priority", f"優先度は整数で指定してください: {value!r}")
    if not PRIORITY_MIN <= value <= PRIORITY_MAX:
        raise ValidationError(
            "priority", f"優先度は{PRIORITY_MIN}から{PRIORITY_MAX}の範囲で指定してください。"
        )
    return int(value)


def validate_deadline(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise ValidationError("deadline", f"期限は日時で指定してください: {value!r}")
    return normalize_deadline(value)


def validate_memo(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("memo", "メモは文字列で入力してください。")
    return value
