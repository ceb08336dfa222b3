from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func

from fodmap_diary.database import Base


class DiaryRecord(Base):
    """One diary entry stored as a JSON document under its timestamp key."""

    __tablename__ = "diary_entries"

    # ISO-8601 UTC timestamp; lexicographic order is chronological order
    key = Column(String(32), primary_key=True)
    value = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
