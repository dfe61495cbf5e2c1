"""Five-week calendar grid construction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum

from .locale_format import LocaleFormatter

GRID_WEEKS = 5
GRID_DAYS = GRID_WEEKS * 7


class WeekStart(StrEnum):
    MONDAY = "monday"
    SUNDAY = "sunday"


@dataclass(frozen=True)
class CalendarDay:
    """One cell of the five-week grid."""

    date: date
    label: str
    weekday_label: str
    is_today: bool
    is_weekend: bool


def normalize_week_start(value: str | None) -> WeekStart:
    """Anything other than ``sunday`` selects a Monday-first week."""
    if isinstance(value, str) and value.strip().lower() == WeekStart.SUNDAY:
        return WeekStart.SUNDAY
    return WeekStart.MONDAY


def _sunday_index(day: date) -> int:
    # date.weekday() is Monday=0; shift to Sunday=0..Saturday=6.
    return (day.weekday() + 1) % 7


def is_weekend(day: date) -> bool:
    return _sunday_index(day) in (0, 6)


def start_of_week(reference: date, week_start: WeekStart) -> date:
    day = _sunday_index(reference)
    if week_start is WeekStart.MONDAY:
        offset = (day + 6) % 7
    else:
        offset = day
    return reference - timedelta(days=offset)


def build_five_week_grid(
    reference: date,
    week_start: WeekStart,
    formatter: LocaleFormatter,
) -> tuple[CalendarDay, ...]:
    """Return the 35 days starting at the week boundary that contains ``reference``."""
    anchor = start_of_week(reference, week_start)
    days: list[CalendarDay] = []
    for index in range(GRID_DAYS):
        current = anchor + timedelta(days=index)
        days.append(
            CalendarDay(
                date=current,
                label=str(current.day),
                weekday_label=formatter.format_weekday(current),
                is_today=current == reference,
                is_weekend=is_weekend(current),
            )
        )
    return tuple(days)


def weekday_header_labels(week_start: WeekStart, formatter: LocaleFormatter) -> tuple[tuple[str, bool], ...]:
    """Return ``(label, is_weekend)`` for the seven header columns in display order."""
    # 2024-01-01 was a Monday; any fixed week works.
    monday = date(2024, 1, 1)
    first = monday if week_start is WeekStart.MONDAY else monday - timedelta(days=1)
    columns = (first + timedelta(days=offset) for offset in range(7))
    return tuple((formatter.format_weekday(column), is_weekend(column)) for column in columns)
