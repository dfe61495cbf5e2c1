"""Locale-aware date, time, and event-line formatting for the calendar page.

``LOCALE_IDENTIFIERS`` is the only place a short locale tag is mapped onto a
full locale identifier. Every user-facing date or time string on the page is
produced by a ``LocaleFormatter`` bound to one of those identifiers, so a
locale switch changes all of them together.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from enum import StrEnum
from typing import TYPE_CHECKING

from .i18n import DEFAULT_LOCALE, MESSAGES, translate

if TYPE_CHECKING:
    from .occurrences import OccurrenceRecord

INVALID_DATE_TEXT = "Invalid Date"


class FormatKind(StrEnum):
    DATE = "date"
    WEEKDAY = "weekday"
    CLOCK = "clock"
    DATETIME = "datetime"


@dataclass(frozen=True)
class LocaleConventions:
    """Formatting conventions for one full locale identifier."""

    identifier: str
    date_pattern: str
    # Indexed by ``date.weekday()`` (Monday=0).
    weekday_names: tuple[str, str, str, str, str, str, str]
    clock_pattern: str = "%H:%M"


LOCALE_IDENTIFIERS: dict[str, str] = {
    "ko": "ko-KR",
    "en": "en-US",
}

LOCALE_CONVENTIONS: dict[str, LocaleConventions] = {
    "ko-KR": LocaleConventions(
        identifier="ko-KR",
        date_pattern="%Y. %m. %d.",
        weekday_names=("월", "화", "수", "목", "금", "토", "일"),
    ),
    "en-US": LocaleConventions(
        identifier="en-US",
        date_pattern="%m/%d/%Y",
        weekday_names=("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
    ),
}


def locale_identifier(locale: str | None) -> str:
    """Return the full identifier for ``locale``, falling back to the default mapping."""
    if locale and locale in LOCALE_IDENTIFIERS:
        return LOCALE_IDENTIFIERS[locale]
    return LOCALE_IDENTIFIERS[DEFAULT_LOCALE]


class LocaleFormatter:
    """Format instants and calendar dates for a single supported locale.

    ``tz`` is the viewer's time zone; ``None`` means the process's local zone.
    """

    def __init__(self, locale: str | None, tz: tzinfo | None = None) -> None:
        self.locale = locale if locale in MESSAGES else DEFAULT_LOCALE
        self.identifier = locale_identifier(self.locale)
        self.conventions = LOCALE_CONVENTIONS[self.identifier]
        self.tz = tz

    def t(self, key: str) -> str:
        return translate(self.locale, key)

    def localize(self, value: datetime) -> datetime:
        if self.tz is None:
            return value.astimezone()
        return value.astimezone(self.tz)

    def format(self, value: datetime | date | None, kind: FormatKind) -> str:
        if value is None:
            return INVALID_DATE_TEXT
        if isinstance(value, datetime):
            try:
                value = self.localize(value)
            except OverflowError:
                return INVALID_DATE_TEXT
        elif kind in (FormatKind.CLOCK, FormatKind.DATETIME):
            value = datetime.combine(value, datetime.min.time())
        if kind is FormatKind.DATE:
            return value.strftime(self.conventions.date_pattern)
        if kind is FormatKind.WEEKDAY:
            return self.conventions.weekday_names[value.weekday()]
        if kind is FormatKind.CLOCK:
            return value.strftime(self.conventions.clock_pattern)
        return f"{value.strftime(self.conventions.date_pattern)} {value.strftime(self.conventions.clock_pattern)}"

    def format_date(self, value: datetime | date) -> str:
        return self.format(value, FormatKind.DATE)

    def format_weekday(self, value: datetime | date) -> str:
        return self.format(value, FormatKind.WEEKDAY)

    def format_clock(self, value: datetime | None) -> str:
        return self.format(value, FormatKind.CLOCK)

    def format_datetime(self, value: datetime) -> str:
        return self.format(value, FormatKind.DATETIME)

    def format_event_line(self, record: OccurrenceRecord) -> str:
        """Render one grid-cell line: all-day marker + title, or ``HH:MM~HH:MM title``."""
        title = record.summary or self.t("calendar.no_title")
        if record.all_day:
            return f"{self.t('calendar.all_day_prefix')}{title}"
        start_text = self.format_clock(record.start)
        end_text = self.format_clock(record.end)
        return f"{start_text}~{end_text} {title}"
