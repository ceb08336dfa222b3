"""Ordered key-value store of diary entries on top of a SQLAlchemy session."""

from typing import Iterator

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from fodmap_diary.exceptions import EntryNotFoundError
from fodmap_diary.models.diary_record import DiaryRecord


class DiaryStore:
    """
    CRUD over ``diary_entries`` keyed by timestamp string.

    Every write commits immediately, so each operation is a single-row
    atomic read or write. Values are plain JSON-serializable dicts.
    """

    def __init__(self, db: Session):
        self.db = db

    def put(self, key: str, value: dict) -> None:
        record = self.db.get(DiaryRecord, key)
        if record is None:
            self.db.add(DiaryRecord(key=key, value=value))
        else:
            record.value = value
            flag_modified(record, "value")
        self.db.commit()

    def get(self, key: str) -> dict:
        record = self.db.get(DiaryRecord, key)
        if record is None:
            raise EntryNotFoundError(key)
        return dict(record.value)

    def exists(self, key: str) -> bool:
        return self.db.get(DiaryRecord, key) is not None

    def delete(self, key: str) -> None:
        record = self.db.get(DiaryRecord, key)
        if record is None:
            raise EntryNotFoundError(key)
        self.db.delete(record)
        self.db.commit()

    def scan_all(self, batch_size: int = 100) -> Iterator[tuple[str, dict]]:
        """Lazily yield ``(key, value)`` pairs in key order."""
        query = self.db.query(DiaryRecord).order_by(DiaryRecord.key).yield_per(batch_size)
        for record in query:
            yield record.key, dict(record.value)
