"""Business logic for the diary entry lifecycle."""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from fodmap_diary.config import settings
from fodmap_diary.exceptions import (
    AnalysisError,
    EmptyInputError,
    EntryUpdateError,
    InvalidEntryError,
)
from fodmap_diary.services.ai_service import DiaryAIProvider
from fodmap_diary.services.diary_store import DiaryStore
from fodmap_diary.services.entries import (
    FoodEntry,
    NoteEntry,
    SymptomEntry,
    dump_entry,
    format_timestamp,
    next_timestamp,
    parse_entry,
)

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class DiaryService:
    """Entry operations composed from a store and an AI provider."""

    def __init__(
        self,
        store: DiaryStore,
        ai: Optional[DiaryAIProvider] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.store = store
        self.ai = ai
        self.tz = tz or ZoneInfo(settings.diary_timezone)

    # =========================================================================
    # Keys
    # =========================================================================

    def _free_key(self, key: str) -> str:
        """Bump ``key`` one millisecond at a time until no entry uses it."""
        while self.store.exists(key):
            key = next_timestamp(key)
        return key

    def _to_utc(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.tz)
        return moment.astimezone(timezone.utc)

    def _save(self, entry: FoodEntry | SymptomEntry | NoteEntry, key: Optional[str] = None) -> dict:
        key = key or entry.timestamp
        data = dump_entry(entry)
        self.store.put(key, data)
        return {"key": key, **data}

    # =========================================================================
    # Reading
    # =========================================================================

    def list_entries(self) -> list[dict]:
        """
        All entries with their ``key``, newest first.

        Legacy records are normalized; records that still do not validate are
        returned as stored rather than hidden.
        """
        entries = []
        for key, value in self.store.scan_all():
            try:
                value = dump_entry(parse_entry(value))
            except ValidationError as e:
                logger.warning("Entry %s does not match any known shape: %s", key, e)
            entries.append({**value, "key": key})

        entries.sort(key=lambda e: e.get("timestamp") or e["key"], reverse=True)
        return entries

    def get_entry(self, key: str) -> FoodEntry | SymptomEntry | NoteEntry:
        """
        Load and validate one entry.

        Raises:
            EntryNotFoundError: no entry under ``key``
            InvalidEntryError: the stored value matches no entry shape
        """
        value = self.store.get(key)
        try:
            return parse_entry(value)
        except ValidationError as e:
            raise InvalidEntryError(f"Entry {key} has an unreadable shape: {e}") from e

    # =========================================================================
    # Writing
    # =========================================================================

    async def add_entry(
        self,
        text: str,
        is_note: bool = False,
        custom_time: Optional[datetime] = None,
    ) -> dict:
        """
        Create an entry from free text.

        Notes are stored as-is; anything else is classified by the AI provider
        first. ``custom_time`` overrides "now"; a naive value is read in the
        diary timezone.
        """
        text = (text or "").strip()
        if not text:
            raise EmptyInputError("Entry text is empty")

        moment = self._to_utc(custom_time) if custom_time else datetime.now(timezone.utc)
        timestamp = self._free_key(format_timestamp(moment))

        if is_note:
            payload = {"type": "note"}
        else:
            payload = await self.ai.classify(text)

        entry = parse_entry({**payload, "text": text, "timestamp": timestamp})
        saved = self._save(entry)
        logger.info("Stored %s entry %s", entry.type, timestamp)
        return saved

    def duplicate_entry(self, key: str) -> dict:
        """Copy an entry under a new timestamp later than the original's."""
        original = self.get_entry(key)

        timestamp = max(format_timestamp(datetime.now(timezone.utc)), next_timestamp(key))
        timestamp = self._free_key(timestamp)

        return self._save(original.model_copy(update={"timestamp": timestamp}))

    def update_entry(
        self,
        key: str,
        factors: Optional[dict] = None,
        severity: Optional[str] = None,
        tag: Any = _UNSET,
    ) -> dict:
        """
        Patch an entry in place.

        Args:
            key: Entry key
            factors: Factor levels merged into the existing map (food only)
            severity: New severity (symptom only)
            tag: Label to toggle (food only); the current tag, an empty string
                or None clears it

        Raises:
            EntryNotFoundError: no entry under ``key``
            EntryUpdateError: a field does not apply to the entry's type
            InvalidEntryError: the stored value matches no entry shape
        """
        entry = self.get_entry(key)
        data = dump_entry(entry)

        if factors is not None:
            if not isinstance(entry, FoodEntry):
                raise EntryUpdateError(f"Factors only apply to food entries, not {entry.type}")
            data["factors"] = {**entry.factors, **factors}

        if severity is not None:
            if not isinstance(entry, SymptomEntry):
                raise EntryUpdateError(f"Severity only applies to symptom entries, not {entry.type}")
            data["severity"] = severity

        if tag is not _UNSET:
            if not isinstance(entry, FoodEntry):
                raise EntryUpdateError(f"Tags only apply to food entries, not {entry.type}")
            tag = tag.strip() if isinstance(tag, str) else None
            data["tag"] = None if not tag or tag == entry.tag else tag

        try:
            updated = parse_entry(data)
        except ValidationError as e:
            raise EntryUpdateError(f"Invalid update for entry {key}: {e}") from e

        return self._save(updated, key)

    def delete_entry(self, key: str) -> None:
        self.store.delete(key)
        logger.info("Deleted entry %s", key)

    # =========================================================================
    # Analysis
    # =========================================================================

    async def analyze(self, entries: list[dict]) -> dict:
        """Analyze a caller-selected subset of entries (not the whole store)."""
        if not entries:
            raise AnalysisError("No entries found in selected date range")
        try:
            parsed = [parse_entry(e) for e in entries]
        except ValidationError as e:
            raise AnalysisError(f"Invalid diary entry: {e}") from e
        return await self.ai.analyze(parsed)
