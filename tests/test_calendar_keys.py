"""Tests for calendar-day keys."""

from datetime import date, datetime, timezone

import pytest
from hypothesis import given, strategies as st

from workout_trends.calendar_keys import (
    coerce_date_key,
    full_day_difference,
    last_n_days_keys,
    normalize_timezone_name,
    parse_date_key,
    range_keys,
    shift_date_key,
    to_date_key,
    week_bucket_key,
)


def _local_ms(*args: int) -> int:
    return int(datetime(*args).timestamp() * 1000)


class TestToDateKey:
    def test_local_time(self):
        assert to_date_key(_local_ms(2026, 2, 20, 10, 45)) == "2026-02-20"

    def test_zero_padded(self):
        assert to_date_key(_local_ms(2026, 3, 5, 0, 0)) == "2026-03-05"

    def test_explicit_timezone_moves_day(self):
        # 04:30 UTC on Mar 8 is still Mar 7 evening in New York
        ts = int(datetime(2026, 3, 8, 4, 30, tzinfo=timezone.utc).timestamp() * 1000)
        assert to_date_key(ts, timezone_name="UTC") == "2026-03-08"
        assert to_date_key(ts, timezone_name="America/New_York") == "2026-03-07"

    def test_accepts_datetime(self):
        assert to_date_key(datetime(2026, 2, 20, 23, 59)) == "2026-02-20"
        aware = datetime(2026, 2, 20, 23, 30, tzinfo=timezone.utc)
        assert to_date_key(aware, timezone_name="Europe/Berlin") == "2026-02-21"


class TestParseDateKey:
    def test_local_midnight(self):
        assert parse_date_key("2026-02-20") == datetime(2026, 2, 20)

    def test_round_trips_through_to_date_key(self):
        midnight = parse_date_key("2026-10-25")
        assert to_date_key(midnight) == "2026-10-25"

    def test_with_timezone(self):
        parsed = parse_date_key("2026-02-20", timezone_name="Europe/Berlin")
        assert parsed.tzinfo is not None
        assert (parsed.hour, parsed.minute) == (0, 0)

    @pytest.mark.parametrize("zone", ["America/Havana", "America/Santiago"])
    def test_midnight_dst_gap_resolves_to_real_instant(self, zone):
        # Both zones spring forward at local midnight, so that day starts at 01:00
        starts = [
            parse_date_key(key, timezone_name=zone)
            for key in range_keys("2024-01-01", "2024-12-31")
        ]
        for key, start in zip(range_keys("2024-01-01", "2024-12-31"), starts):
            round_trip = start.astimezone(timezone.utc).astimezone(start.tzinfo)
            assert start.date().isoformat() == key
            assert (start.hour, start.utcoffset()) == (round_trip.hour, round_trip.utcoffset())
            assert (start.hour, start.minute) in {(0, 0), (1, 0)}
        assert any(start.hour == 1 for start in starts)

    @pytest.mark.parametrize("bad", ["2026-2-20", "20260220", "", "2026-02-30"])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            parse_date_key(bad)


class TestShiftDateKey:
    def test_forward_and_backward(self):
        assert shift_date_key("2026-02-20", 3) == "2026-02-23"
        assert shift_date_key("2026-02-20", -6) == "2026-02-14"

    def test_month_and_year_boundaries(self):
        assert shift_date_key("2025-12-31", 1) == "2026-01-01"
        assert shift_date_key("2024-03-01", -1) == "2024-02-29"
        assert shift_date_key("2026-01-31", 29) == "2026-03-01"

    def test_across_dst_change(self):
        assert shift_date_key("2026-03-07", 1) == "2026-03-08"
        assert shift_date_key("2026-03-09", -1) == "2026-03-08"

    @given(
        day=st.dates(min_value=date(1900, 1, 1), max_value=date(2100, 12, 31)),
        delta=st.integers(min_value=-36500, max_value=36500),
    )
    def test_shift_round_trip(self, day, delta):
        key = day.isoformat()
        assert shift_date_key(shift_date_key(key, delta), -delta) == key


class TestRangeKeys:
    def test_inclusive(self):
        assert range_keys("2026-02-27", "2026-03-02") == [
            "2026-02-27",
            "2026-02-28",
            "2026-03-01",
            "2026-03-02",
        ]

    def test_single_day(self):
        assert range_keys("2026-02-20", "2026-02-20") == ["2026-02-20"]

    def test_start_after_end(self):
        assert range_keys("2026-02-21", "2026-02-20") == []

    def test_missing_bounds(self):
        assert range_keys(None, "2026-02-20") == []
        assert range_keys("2026-02-20", "") == []

    def test_last_n_days_keys(self):
        assert last_n_days_keys(3, "2026-03-01") == ["2026-02-27", "2026-02-28", "2026-03-01"]
        assert last_n_days_keys(0, "2026-03-01") == []


class TestWeekBucketKey:
    def test_saturday_maps_to_previous_sunday(self):
        assert week_bucket_key("2026-02-21") == "2026-02-15"

    def test_sunday_is_its_own_bucket(self):
        assert week_bucket_key("2026-02-15") == "2026-02-15"
        assert week_bucket_key("2026-02-22") == "2026-02-22"

    def test_year_boundary(self):
        # 2026-01-01 is a Thursday
        assert week_bucket_key("2026-01-01") == "2025-12-28"

    def test_first_calendar_week_buckets_at_earliest_date(self):
        # 0001-01-01 is a Monday; the first Sunday is 0001-01-07
        assert week_bucket_key("0001-01-03") == "0001-01-01"
        assert week_bucket_key("0001-01-07") == "0001-01-07"


class TestFullDayDifference:
    def test_gaps(self):
        assert full_day_difference("2026-03-01", "2026-03-01") == 0
        assert full_day_difference("2026-03-01", "2026-03-06") == 5
        assert full_day_difference("2026-03-01", "2026-03-07") == 6

    def test_never_negative(self):
        assert full_day_difference("2026-03-07", "2026-03-01") == 0

    def test_missing(self):
        assert full_day_difference(None, "2026-03-01") == 0


def test_coerce_date_key_variants():
    assert coerce_date_key("2026-02-20") == "2026-02-20"
    assert coerce_date_key(date(2026, 2, 20)) == "2026-02-20"
    assert coerce_date_key(datetime(2026, 2, 20, 18, 0)) == "2026-02-20"
    assert coerce_date_key(_local_ms(2026, 2, 20, 7, 0)) == "2026-02-20"


def test_normalize_timezone_name():
    assert normalize_timezone_name(" Europe/Berlin ") == "Europe/Berlin"
    assert normalize_timezone_name("utc") == "UTC"
    assert normalize_timezone_name("Mars/Olympus") is None
    assert normalize_timezone_name("") is None
    assert normalize_timezone_name(42) is None
