"""Tests for rest-day-forgiving rolling averages."""

import pytest

from workout_trends.calendar_keys import range_keys, shift_date_key
from workout_trends.models import TrendPoint
from workout_trends.trends import (
    build_rolling_average_series,
    calculate_adjusted_average,
    series_change_ratio,
)


def _values(start_key: str, times: list[int]) -> dict[str, dict[str, int]]:
    return {
        shift_date_key(start_key, offset): {"time": value, "reps": 0}
        for offset, value in enumerate(times)
    }


class TestCalculateAdjustedAverage:
    def test_forgives_one_rest_day_in_a_week(self):
        # 2026-02-15 is a Sunday; two rest days at the end of the week
        values = _values("2026-02-15", [10, 10, 10, 10, 10, 0, 0])
        average = calculate_adjusted_average("2026-02-21", values, "time", 7, "2026-02-15")
        assert average == 50 / 6

    def test_forgiveness_applies_separately_in_each_partial_week(self):
        # Tue 17 .. Sat 21 in one week, Sun 22 .. Mon 23 in the next
        values = _values("2026-02-17", [10, 0, 10, 0, 10, 10, 0])
        average = calculate_adjusted_average("2026-02-23", values, "time", 7, "2026-02-17")
        # week of 15th: 3 active + (2 - 1) rest; week of 22nd: 1 active + 0
        assert average == 40 / 5 == 8

    def test_extra_rest_days_in_a_week_still_count(self):
        values = _values("2026-02-15", [10, 0, 0, 0, 10, 10, 10])
        average = calculate_adjusted_average("2026-02-21", values, "time", 7)
        assert average == pytest.approx(40 / 6)

    def test_all_active_days_is_plain_mean(self):
        times = list(range(1, 11))
        values = _values("2026-02-10", times)
        average = calculate_adjusted_average("2026-02-19", values, "time", 10)
        assert average == pytest.approx(sum(times) / len(times))

    def test_clamps_window_to_first_tracked_day(self):
        values = _values("2026-02-20", [10, 20, 30])
        average = calculate_adjusted_average("2026-02-22", values, "time", 7, "2026-02-20")
        assert average == 20

    def test_clamped_window_with_rest_day(self):
        values = _values("2026-02-20", [10, 0, 10])
        average = calculate_adjusted_average("2026-02-22", values, "time", 7, "2026-02-20")
        assert average == 10

    def test_oversized_window_narrows_to_first_tracked_day(self):
        values = {"2026-02-20": {"time": 10}}
        average = calculate_adjusted_average("2026-02-20", values, "time", 10_000_000, "2026-02-20")
        assert average == 10

    def test_oversized_window_without_floor_stops_at_earliest_date(self):
        # 0001-01-01 .. 0001-01-03 share one week: 1 active + (2 - 1) rest
        values = {"0001-01-03": {"time": 30}}
        average = calculate_adjusted_average("0001-01-03", values, "time", 10_000_000)
        assert average == 15

    def test_without_floor_uses_nominal_window(self):
        values = _values("2026-02-20", [10, 20, 30])
        # Feb 16..21 (2 active, 4 rest -> 5 counted) plus Sun 22 in the next week
        average = calculate_adjusted_average("2026-02-22", values, "time", 7)
        assert average == pytest.approx(60 / 6)

    def test_missing_days_are_rest_days(self):
        values = {"2026-02-16": {"time": 30}, "2026-02-18": {"time": 30}}
        average = calculate_adjusted_average("2026-02-18", values, "time", 3)
        assert average == 30

    def test_metric_is_selected(self):
        values = {"2026-02-16": {"time": 30, "reps": 8}}
        assert calculate_adjusted_average("2026-02-16", values, "reps", 1) == 8

    def test_zero_window(self):
        values = _values("2026-02-20", [10])
        assert calculate_adjusted_average("2026-02-20", values, "time", 0) == 0

    def test_end_before_first_tracked_day(self):
        values = _values("2026-02-20", [10])
        assert calculate_adjusted_average("2026-02-19", values, "time", 7, "2026-02-20") == 0

    def test_no_activity(self):
        assert calculate_adjusted_average("2026-02-21", {}, "time", 7) == 0

    def test_non_finite_values_read_as_zero(self):
        values = {"2026-02-16": {"time": float("nan")}, "2026-02-17": {"time": 10}}
        assert calculate_adjusted_average("2026-02-17", values, "time", 2) == 10


class TestBuildRollingAverageSeries:
    def test_point_per_displayed_day(self):
        values = {
            "2026-02-20": {"time": 10, "reps": 0},
            "2026-02-21": {"time": 20, "reps": 0},
            "2026-02-22": {"time": 0, "reps": 0},
        }
        series = build_rolling_average_series(
            "2026-02-20", "2026-02-22", values, "time", 2, "2026-02-20"
        )
        assert series == [
            TrendPoint("2026-02-20", 10),
            TrendPoint("2026-02-21", 15),
            TrendPoint("2026-02-22", 20),
        ]

    def test_matches_independent_calls(self):
        values = _values("2026-01-25", [30, 0, 45, 60, 0, 0, 15, 90, 0, 30, 30, 0, 0, 0, 20])
        series = build_rolling_average_series(
            "2026-01-28", "2026-02-08", values, "time", 7, "2026-01-25"
        )
        keys = range_keys("2026-01-28", "2026-02-08")
        assert [point.date_key for point in series] == keys
        for point in series:
            assert point.value == calculate_adjusted_average(
                point.date_key, values, "time", 7, "2026-01-25"
            )

    def test_is_repeatable(self):
        values = _values("2026-02-01", [10, 0, 30, 0, 50])
        args = ("2026-02-01", "2026-02-05", values, "time", 3, "2026-02-01")
        assert build_rolling_average_series(*args) == build_rolling_average_series(*args)

    def test_reversed_range(self):
        assert build_rolling_average_series("2026-02-05", "2026-02-01", {}, "time", 7) == []


class TestSeriesChangeRatio:
    def _series(self, values: list[float]) -> list[TrendPoint]:
        keys = range_keys("2026-02-01", "2026-02-28")
        return [TrendPoint(key, value) for key, value in zip(keys, values)]

    def test_change_against_lookback_point(self):
        assert series_change_ratio(self._series([10, 12, 15]), 2) == 0.5

    def test_decline(self):
        assert series_change_ratio(self._series([20, 15]), 1) == -0.25

    def test_zero_baseline(self):
        assert series_change_ratio(self._series([0, 12]), 1) is None

    def test_too_short(self):
        assert series_change_ratio(self._series([10, 12]), 2) is None
        assert series_change_ratio([], 1) is None
