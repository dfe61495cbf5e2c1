"""Tests for the five-week grid."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from epdcal.calendar_grid import (
    GRID_DAYS,
    WeekStart,
    build_five_week_grid,
    is_weekend,
    normalize_week_start,
    start_of_week,
    weekday_header_labels,
)
from epdcal.locale_format import LocaleFormatter


@pytest.fixture
def formatter():
    return LocaleFormatter("en")


class TestFiveWeekGrid:
    def test_monday_start(self, formatter):
        days = build_five_week_grid(date(2024, 3, 14), WeekStart.MONDAY, formatter)
        assert len(days) == GRID_DAYS == 35
        assert days[0].date == date(2024, 3, 11)
        assert days[-1].date == date(2024, 4, 14)
        assert days[0].weekday_label == "Mon"

    def test_sunday_start(self, formatter):
        days = build_five_week_grid(date(2024, 3, 14), WeekStart.SUNDAY, formatter)
        assert days[0].date == date(2024, 3, 10)
        assert days[-1].date == date(2024, 4, 13)
        assert days[0].weekday_label == "Sun"

    def test_days_are_consecutive(self, formatter):
        days = build_five_week_grid(date(2024, 2, 29), WeekStart.MONDAY, formatter)
        for previous, current in zip(days, days[1:]):
            assert current.date - previous.date == timedelta(days=1)

    @pytest.mark.parametrize("week_start", list(WeekStart))
    @pytest.mark.parametrize("offset", range(14))
    def test_grid_properties_across_reference_dates(self, formatter, week_start, offset):
        # Two weeks spanning a month end and a leap day.
        reference = date(2024, 2, 22) + timedelta(days=offset)
        days = build_five_week_grid(reference, week_start, formatter)
        assert len(days) == GRID_DAYS
        assert [day.date for day in days if day.is_today] == [reference]
        expected_first = 0 if week_start is WeekStart.MONDAY else 6
        assert days[0].date.weekday() == expected_first
        assert days[0].date <= reference < days[7].date

    def test_reference_on_week_boundary(self, formatter):
        # 2024-03-11 is a Monday; 2024-03-10 is a Sunday.
        assert build_five_week_grid(date(2024, 3, 11), WeekStart.MONDAY, formatter)[0].date == date(2024, 3, 11)
        assert build_five_week_grid(date(2024, 3, 10), WeekStart.MONDAY, formatter)[0].date == date(2024, 3, 4)
        assert build_five_week_grid(date(2024, 3, 10), WeekStart.SUNDAY, formatter)[0].date == date(2024, 3, 10)

    def test_labels_are_day_of_month(self, formatter):
        days = build_five_week_grid(date(2024, 3, 14), WeekStart.MONDAY, formatter)
        assert [day.label for day in days[:3]] == ["11", "12", "13"]

    def test_weekend_flags_independent_of_week_start(self, formatter):
        monday_grid = build_five_week_grid(date(2024, 3, 14), WeekStart.MONDAY, formatter)
        sunday_grid = build_five_week_grid(date(2024, 3, 14), WeekStart.SUNDAY, formatter)
        monday_weekends = {day.date for day in monday_grid if day.is_weekend}
        sunday_weekends = {day.date for day in sunday_grid if day.is_weekend}
        shared = {day.date for day in monday_grid} & {day.date for day in sunday_grid}
        assert monday_weekends & shared == sunday_weekends & shared
        assert all(day.date.weekday() in (5, 6) for day in monday_grid if day.is_weekend)


class TestWeekHelpers:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("sunday", WeekStart.SUNDAY),
            (" Sunday ", WeekStart.SUNDAY),
            ("monday", WeekStart.MONDAY),
            ("tuesday", WeekStart.MONDAY),
            ("", WeekStart.MONDAY),
            (None, WeekStart.MONDAY),
        ],
    )
    def test_normalize_week_start(self, raw, expected):
        assert normalize_week_start(raw) is expected

    def test_is_weekend(self):
        assert is_weekend(date(2024, 3, 16))
        assert is_weekend(date(2024, 3, 17))
        assert not is_weekend(date(2024, 3, 15))

    def test_start_of_week(self):
        assert start_of_week(date(2024, 3, 17), WeekStart.MONDAY) == date(2024, 3, 11)
        assert start_of_week(date(2024, 3, 17), WeekStart.SUNDAY) == date(2024, 3, 17)


class TestWeekdayHeader:
    def test_monday_first_english(self, formatter):
        labels = weekday_header_labels(WeekStart.MONDAY, formatter)
        assert [label for label, _ in labels] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert [weekend for _, weekend in labels] == [False] * 5 + [True, True]

    def test_sunday_first_korean(self):
        labels = weekday_header_labels(WeekStart.SUNDAY, LocaleFormatter("ko"))
        assert [label for label, _ in labels] == ["일", "월", "화", "수", "목", "금", "토"]
        assert labels[0][1] and labels[-1][1]
