from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, LargeBinary, String

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StorageSlotModel(Base):
    __tablename__ = "storage_slots"

    key = Column(String(64), primary_key=True)
    payload = Column(LargeBinary, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
