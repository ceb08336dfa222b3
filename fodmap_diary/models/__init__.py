"""
Database models for the FODMAP diary.

Import all models here so Alembic can detect them for migrations.
"""

from fodmap_diary.database import Base
from fodmap_diary.models.diary_record import DiaryRecord

__all__ = [
    "Base",
    "DiaryRecord",
]
