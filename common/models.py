"""SQLAlchemy models and shared enums."""
from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class ResourceType(str, Enum):
    ROOM = "room"
    EQUIPMENT = "equipment"


class StoredEntry(Base):
    """One key of the local string-keyed store."""

    __tablename__ = "stored_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
