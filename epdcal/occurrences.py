"""Occurrence records from ``/api/events`` and their per-day index.

Occurrences are bucketed by the calendar date of their start instant in the
viewer's local time zone. The events source also declares a
``display_timezone``; the two are deliberately not reconciled here.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from typing import Any

MAX_EVENTS_PER_DAY = 3
# Key produced for an occurrence whose start could not be parsed.
INVALID_DATE_KEY = "Invalid Date"

_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


class OccurrencePayloadError(ValueError):
    """Raised when an occurrence entry is not a JSON object."""


@dataclass(frozen=True)
class OccurrenceRecord:
    """One expanded calendar event instance, as received from the events source."""

    source_id: str
    uid: str
    instance_key: str
    summary: str
    description: str
    location: str
    all_day: bool
    start: datetime | None
    end: datetime | None


OccurrenceIndex = dict[str, list[OccurrenceRecord]]


def parse_instant(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp; naive values are UTC, garbage is ``None``."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    text = _EXCESS_FRACTION.sub(r"\1", text)
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def parse_occurrence(raw: Any) -> OccurrenceRecord:
    if not isinstance(raw, Mapping):
        raise OccurrencePayloadError(f"occurrence must be an object, got {type(raw).__name__}")
    return OccurrenceRecord(
        source_id=_text(raw.get("source_id")),
        uid=_text(raw.get("uid")),
        instance_key=_text(raw.get("instance_key")),
        summary=_text(raw.get("summary")),
        description=_text(raw.get("description")),
        location=_text(raw.get("location")),
        all_day=bool(raw.get("all_day")),
        start=parse_instant(raw.get("start")),
        end=parse_instant(raw.get("end")),
    )


def parse_occurrences(raw: Sequence[Any] | None) -> list[OccurrenceRecord]:
    if raw is None:
        return []
    return [parse_occurrence(item) for item in raw]


def date_key_for_date(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def date_key(instant: datetime | None, tz: tzinfo | None = None) -> str:
    """Return the ``YYYY-MM-DD`` key of ``instant`` in the viewer's zone (``None`` = local)."""
    if instant is None:
        return INVALID_DATE_KEY
    try:
        local = instant.astimezone(tz) if tz is not None else instant.astimezone()
    except OverflowError:
        return INVALID_DATE_KEY
    return date_key_for_date(local.date())


def index_occurrences(records: Iterable[OccurrenceRecord], tz: tzinfo | None = None) -> OccurrenceIndex:
    """Group records under their start date, keeping arrival order.

    Multi-day and all-day spans land only on their start date.
    """
    index: OccurrenceIndex = {}
    for record in records:
        index.setdefault(date_key(record.start, tz), []).append(record)
    return index


def visible_occurrences(
    index: Mapping[str, Sequence[OccurrenceRecord]],
    day: date,
    limit: int = MAX_EVENTS_PER_DAY,
) -> list[OccurrenceRecord]:
    """Return at most ``limit`` records for ``day``; the rest are silently dropped."""
    return list(index.get(date_key_for_date(day), ())[:limit])
