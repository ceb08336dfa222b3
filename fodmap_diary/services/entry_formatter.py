"""Compact text rendering of diary entries for the analysis prompt."""

from datetime import date, datetime, timezone, tzinfo
from typing import Iterable

from fodmap_diary.factors import SILENT_LEVELS
from fodmap_diary.services.entries import FoodEntry, SymptomEntry, NoteEntry, parse_entry


def _date_label(day: date) -> str:
    return f"{day:%b} {day.day}"


def _time_label(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt:%M} {dt:%p}"


def _factor_tags(entry: FoodEntry) -> str:
    tags = [
        f"[{level} {factor_id}]"
        for factor_id, level in entry.factors.items()
        if level and level not in SILENT_LEVELS
    ]
    if not tags and entry.risk and entry.risk not in SILENT_LEVELS:
        tags.append(f"[{entry.risk} risk]")
    return " ".join(tags)


def format_entry_line(entry: FoodEntry | SymptomEntry | NoteEntry, tz: tzinfo) -> str:
    time = _time_label(entry.recorded_at.astimezone(tz))

    if isinstance(entry, FoodEntry):
        line = f"  {time}: {entry.text}"
        if entry.tag:
            line += f" ({entry.tag})"
        tags = _factor_tags(entry)
        return f"{line} {tags}" if tags else line
    if isinstance(entry, SymptomEntry):
        return f"  {time}: SYMPTOM - {entry.text} [{entry.severity}]"
    return f"  {time}: NOTE - {entry.text}"


def format_entries_for_analysis(
    entries: Iterable[FoodEntry | SymptomEntry | NoteEntry | dict],
    tz: tzinfo = timezone.utc,
) -> str:
    """
    Group entries by calendar date in ``tz`` and render one line per entry.

    Date groups keep the order in which their first entry appears in
    ``entries``; entries inside a group are sorted by time of day.

    Example output::

        Jan 1
          8:00 AM: banana (safe) [low fructans]
          8:00 PM: SYMPTOM - bloating [high]
    """
    by_date: dict[date, list] = {}
    for raw in entries:
        entry = parse_entry(raw)
        local = entry.recorded_at.astimezone(tz)
        by_date.setdefault(local.date(), []).append(entry)

    blocks = []
    for day, day_entries in by_date.items():
        day_entries.sort(key=lambda e: e.recorded_at)
        lines = [_date_label(day)]
        lines.extend(format_entry_line(e, tz) for e in day_entries)
        blocks.append("\n".join(lines))

    return "\n\n".join(blocks)
