"""Tests for occurrence parsing and the per-day index."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from epdcal.occurrences import (
    INVALID_DATE_KEY,
    MAX_EVENTS_PER_DAY,
    OccurrencePayloadError,
    date_key,
    index_occurrences,
    parse_instant,
    parse_occurrence,
    parse_occurrences,
    visible_occurrences,
)

KST = timezone(timedelta(hours=9))


def _raw(uid: str, start: str | None, **overrides) -> dict:
    data = {
        "source_id": "work",
        "uid": uid,
        "instance_key": f"{uid}-1",
        "summary": uid.title(),
        "description": "",
        "location": "",
        "all_day": False,
        "start": start,
        "end": None,
    }
    data.update(overrides)
    return data


class TestParseInstant:
    def test_utc_suffix(self):
        assert parse_instant("2024-03-14T09:00:00Z") == datetime(2024, 3, 14, 9, 0, tzinfo=UTC)

    def test_offset(self):
        parsed = parse_instant("2024-03-14T09:00:00+09:00")
        assert parsed == datetime(2024, 3, 14, 0, 0, tzinfo=UTC)

    def test_long_fraction_truncated(self):
        parsed = parse_instant("2024-03-14T09:00:00.123456789Z")
        assert parsed is not None
        assert parsed.microsecond == 123456

    def test_naive_is_utc(self):
        assert parse_instant("2024-03-14T09:00:00").tzinfo is UTC

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", "2024-13-40T00:00:00Z", 12345])
    def test_garbage_is_none(self, value):
        assert parse_instant(value) is None


class TestParseOccurrence:
    def test_fields_copied(self):
        record = parse_occurrence(_raw("standup", "2024-03-14T09:00:00Z", location="Room 1", all_day=True))
        assert record.uid == "standup"
        assert record.instance_key == "standup-1"
        assert record.location == "Room 1"
        assert record.all_day is True
        assert record.end is None

    def test_missing_fields_become_empty(self):
        record = parse_occurrence({})
        assert record.summary == ""
        assert record.all_day is False
        assert record.start is None

    def test_non_object_rejected(self):
        with pytest.raises(OccurrencePayloadError):
            parse_occurrence(["not", "an", "object"])

    def test_null_list_is_empty(self):
        assert parse_occurrences(None) == []


class TestDateKey:
    def test_uses_viewer_zone(self):
        instant = datetime(2024, 3, 14, 20, 0, tzinfo=UTC)
        assert date_key(instant, UTC) == "2024-03-14"
        assert date_key(instant, KST) == "2024-03-15"

    def test_unparseable_start(self):
        assert date_key(None, UTC) == INVALID_DATE_KEY


class TestIndexOccurrences:
    def test_same_day_bucketed_in_arrival_order(self):
        records = parse_occurrences(
            [
                _raw("late", "2024-03-14T15:00:00Z"),
                _raw("early", "2024-03-14T08:00:00Z"),
                _raw("other", "2024-03-15T08:00:00Z"),
            ]
        )
        index = index_occurrences(records, UTC)
        assert [record.uid for record in index["2024-03-14"]] == ["late", "early"]
        assert [record.uid for record in index["2024-03-15"]] == ["other"]

    def test_multi_day_event_only_on_start_date(self):
        records = parse_occurrences(
            [_raw("trip", "2024-03-14T00:00:00Z", end="2024-03-17T00:00:00Z", all_day=True)]
        )
        index = index_occurrences(records, UTC)
        assert list(index) == ["2024-03-14"]

    def test_unparseable_start_under_invalid_key(self):
        records = parse_occurrences([_raw("broken", "yesterday-ish")])
        index = index_occurrences(records, UTC)
        assert list(index) == [INVALID_DATE_KEY]

    def test_buckets_follow_viewer_zone_not_display_timezone(self):
        # The payload's display_timezone plays no part in bucketing; only the
        # viewer zone passed to the index decides the day.
        records = parse_occurrences([_raw("call", "2024-03-14T23:30:00Z")])
        assert list(index_occurrences(records, UTC)) == ["2024-03-14"]
        assert list(index_occurrences(records, KST)) == ["2024-03-15"]

    def test_every_record_indexed_once(self):
        records = parse_occurrences([_raw(f"e{i}", f"2024-03-{10 + i % 3:02d}T09:00:00Z") for i in range(9)])
        index = index_occurrences(records, UTC)
        assert sum(len(bucket) for bucket in index.values()) == len(records)


class TestVisibleOccurrences:
    def test_truncated_to_three(self):
        records = parse_occurrences([_raw(f"e{i}", f"2024-03-14T0{i}:00:00Z") for i in range(5)])
        index = index_occurrences(records, UTC)
        visible = visible_occurrences(index, date(2024, 3, 14))
        assert MAX_EVENTS_PER_DAY == 3
        assert [record.uid for record in visible] == ["e0", "e1", "e2"]
        assert len(index["2024-03-14"]) == 5

    def test_empty_day(self):
        assert visible_occurrences({}, date(2024, 3, 14)) == []
