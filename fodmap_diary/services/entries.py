"""
Pydantic models for diary entries.

Entries are stored as JSON documents; these models are the single place where
stored shapes (including legacy ones) are validated and normalized on read.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from fodmap_diary.factors import FACTOR_IDS, LEVELS

logger = logging.getLogger(__name__)

Level = Literal["none", "low", "medium", "high", "unknown"]
Severity = Literal["low", "medium", "high"]
FactorId = Literal[tuple(FACTOR_IDS)]


def format_timestamp(dt: datetime) -> str:
    """Render ``dt`` as a fixed-width UTC key, e.g. ``2024-01-01T08:00:00.000Z``."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def next_timestamp(value: str) -> str:
    """The key one millisecond after ``value``."""
    return format_timestamp(parse_timestamp(value) + timedelta(milliseconds=1))


def normalize_level(value: Any) -> str:
    """Lower-case a level string; anything unrecognised becomes ``unknown``."""
    level = value.strip().lower() if isinstance(value, str) else ""
    return level if level in LEVELS else "unknown"


def clean_factors(raw: Any) -> dict:
    """Keep configured factor ids only, with lower-cased level strings."""
    if not isinstance(raw, dict):
        return {}
    cleaned = {}
    for factor_id, level in raw.items():
        if factor_id not in FACTOR_IDS:
            logger.debug("Dropping unknown factor %r", factor_id)
            continue
        cleaned[factor_id] = normalize_level(level)
    return cleaned


class _EntryBase(BaseModel):
    # Unknown keys written by older versions are kept, not discarded
    model_config = ConfigDict(extra="allow")

    timestamp: str
    text: str

    @field_validator("timestamp")
    @classmethod
    def _check_timestamp(cls, v: str) -> str:
        parse_timestamp(v)
        return v

    @property
    def recorded_at(self) -> datetime:
        return parse_timestamp(self.timestamp)


class FoodEntry(_EntryBase):
    type: Literal["food"]
    factors: dict[FactorId, Level] = Field(default_factory=dict)
    tag: Optional[str] = None
    note: str = ""
    risk: Optional[Level] = None  # oldest schema: one overall level

    @model_validator(mode="before")
    @classmethod
    def _normalize_legacy(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        legacy = {}
        for field in ("fodmaps", "other"):
            part = data.pop(field, None)
            if isinstance(part, dict):
                legacy.update(part)
        factors = data.get("factors")
        if factors is None and legacy:
            factors = legacy
        data["factors"] = clean_factors(factors)
        if data.get("risk") is not None:
            data["risk"] = normalize_level(data["risk"])
        return data


class SymptomEntry(_EntryBase):
    type: Literal["symptom"]
    severity: Severity
    note: str = ""

    @field_validator("severity", mode="before")
    @classmethod
    def _lower_severity(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class NoteEntry(_EntryBase):
    type: Literal["note"]


DiaryEntry = Annotated[
    Union[FoodEntry, SymptomEntry, NoteEntry],
    Field(discriminator="type"),
]

_entry_adapter = TypeAdapter(DiaryEntry)


def parse_entry(data: Any) -> FoodEntry | SymptomEntry | NoteEntry:
    """Validate a stored or client-supplied entry, normalizing legacy shapes."""
    if isinstance(data, (FoodEntry, SymptomEntry, NoteEntry)):
        return data
    return _entry_adapter.validate_python(data)


def dump_entry(entry: FoodEntry | SymptomEntry | NoteEntry) -> dict:
    """Serialize an entry for storage; ``key`` is never stored inside the value."""
    data = entry.model_dump(exclude_none=True)
    data.pop("key", None)
    if isinstance(entry, FoodEntry) and "tag" not in data:
        data["tag"] = None
    return data

