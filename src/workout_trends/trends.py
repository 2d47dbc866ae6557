"""Rest-day-forgiving rolling averages.

The adjusted average over a trailing window divides the window's total by the
number of days that count. Inside each Sunday-Saturday week one zero-value day
is forgiven and drops out of the denominator, so a single planned rest day per
week does not drag the trend down. Further rest days in the same week still
count. A week only partly inside the window gets its own forgiveness.

The window never reaches back before the first tracked day.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Mapping, Sequence
from datetime import date, timedelta
from typing import Any

from .calendar_keys import date_from_key, full_day_difference, range_keys, week_bucket_key
from .models import TrendPoint


def _metric_value(values_by_day: Mapping[str, Mapping[str, Any]], date_key: str, metric: str) -> float:
    raw = (values_by_day.get(date_key) or {}).get(metric)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not math.isfinite(raw):
        return 0
    return raw


def _window_start(
    end_date_key: str,
    window_days: int,
    first_tracked_date_key: str | None,
) -> str:
    if first_tracked_date_key and window_days - 1 >= full_day_difference(
        first_tracked_date_key, end_date_key
    ):
        return first_tracked_date_key

    end_day = date_from_key(end_date_key)
    span = min(window_days - 1, (end_day - date.min).days)
    nominal_start = (end_day - timedelta(days=span)).isoformat()
    if first_tracked_date_key and nominal_start < first_tracked_date_key:
        return first_tracked_date_key
    return nominal_start


def calculate_adjusted_average(
    end_date_key: str | None,
    values_by_day: Mapping[str, Mapping[str, Any]],
    metric: str,
    window_days: int,
    first_tracked_date_key: str | None = None,
) -> float:
    """Average of ``metric`` over the window ending ``end_date_key``.

    Returns 0.0 for a zero/negative window, a window that starts after it
    ends (end before the first tracked day), or when no day counts.
    """
    if not end_date_key or window_days <= 0:
        return 0.0

    start_date_key = _window_start(end_date_key, window_days, first_tracked_date_key)
    day_keys = range_keys(start_date_key, end_date_key)
    if not day_keys:
        return 0.0

    total = 0
    # week bucket -> [active_days, rest_days]
    weekly_buckets: dict[str, list[int]] = defaultdict(lambda: [0, 0])

    for date_key in day_keys:
        value = _metric_value(values_by_day, date_key, metric)
        total += value

        bucket = weekly_buckets[week_bucket_key(date_key)]
        if value > 0:
            bucket[0] += 1
        else:
            bucket[1] += 1

    counted_days = sum(
        active_days + max(0, rest_days - 1)
        for active_days, rest_days in weekly_buckets.values()
    )

    if counted_days == 0:
        return 0.0
    return total / counted_days


def build_rolling_average_series(
    start_date_key: str | None,
    end_date_key: str | None,
    values_by_day: Mapping[str, Mapping[str, Any]],
    metric: str,
    window_days: int,
    first_tracked_date_key: str | None = None,
) -> list[TrendPoint]:
    """One adjusted-average point per day from start to end inclusive."""
    return [
        TrendPoint(
            date_key=date_key,
            value=calculate_adjusted_average(
                date_key,
                values_by_day,
                metric,
                window_days,
                first_tracked_date_key,
            ),
        )
        for date_key in range_keys(start_date_key, end_date_key)
    ]


def series_change_ratio(series: Sequence[TrendPoint], lookback_days: int) -> float | None:
    """Relative change of the last point against the point ``lookback_days`` earlier.

    ``None`` when the series is too short or the baseline is zero.
    """
    if lookback_days <= 0 or len(series) <= lookback_days:
        return None

    latest = series[-1].value
    baseline = series[-1 - lookback_days].value
    if baseline == 0:
        return None
    return (latest - baseline) / baseline
