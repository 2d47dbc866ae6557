"""Everything the trends view needs, as raw numbers, in one pass."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict
from typing import Any

from .calendar_keys import coerce_date_key, shift_date_key, to_date_key
from .config import Config
from .daily_totals import (
    build_daily_totals,
    daily_entry_counts,
    entries_within_days,
    first_tracked_date_key,
    summarize_entries,
)
from .models import METRICS, MOVEMENT_TYPES, Entry
from .movement_history import build_movement_history, movement_totals, select_stale_movements
from .streaks import activity_heatmap, compute_streak_stats
from .trends import build_rolling_average_series, series_change_ratio

logger = logging.getLogger(__name__)

HEATMAP_DAYS = 56


def build_trend_snapshot(
    entries: Sequence[Entry],
    today: Any,
    config: Config | None = None,
) -> dict[str, Any]:
    """Build the trends payload for ``today``.

    ``today`` is a DateKey, ``date``, datetime or epoch millis; it is never
    read from the clock. Values are unformatted: seconds, counts, ratios.
    """
    config = config or Config()
    timezone_name = config.timezone
    today_key = coerce_date_key(today, timezone_name=timezone_name)

    values_by_day = build_daily_totals(entries, timezone_name=timezone_name)
    first_key = first_tracked_date_key(entries, timezone_name=timezone_name)
    counts = daily_entry_counts(entries, timezone_name=timezone_name)

    today_entries = [
        entry
        for entry in entries
        if to_date_key(entry.timestamp, timezone_name=timezone_name) == today_key
    ]
    last_7 = entries_within_days(entries, 7, today_key, timezone_name=timezone_name)
    last_30 = entries_within_days(entries, 30, today_key, timezone_name=timezone_name)

    chart_start = shift_date_key(today_key, -(config.chart_days - 1))
    trend: dict[str, Any] = {}
    for metric in METRICS:
        series = build_rolling_average_series(
            chart_start,
            today_key,
            values_by_day,
            metric,
            config.trend_window_days,
            first_key,
        )
        trend[metric] = {
            "window_days": config.trend_window_days,
            "points": [asdict(point) for point in series],
            "change_ratio": series_change_ratio(series, config.baseline_lookback_days),
        }

    history = build_movement_history(entries, timezone_name=timezone_name)
    stale_movements = {
        movement_type: sorted(
            select_stale_movements(
                history[movement_type],
                None,
                today_key,
                min_logs=config.stale_min_logs,
                stale_after_days=config.stale_after_days,
                max_highlights=config.stale_max_highlights,
            )
        )
        for movement_type in MOVEMENT_TYPES
    }

    streak = compute_streak_stats(counts, today_key)

    logger.info(
        "Built trend snapshot for %s (entries=%d, active_days=%d, current_streak=%d, timezone=%s)",
        today_key,
        len(entries),
        streak.active_days,
        streak.current_streak,
        timezone_name or "local",
        extra={"workout_entry_count": len(entries), "workout_today": today_key},
    )

    return {
        "today": today_key,
        "first_tracked_date_key": first_key,
        "today_totals": summarize_entries(today_entries),
        "today_entry_count": len(today_entries),
        "last_7_days": summarize_entries(last_7),
        "last_30_days": summarize_entries(last_30),
        "streak": asdict(streak),
        "trend": trend,
        "heatmap": [
            {"date_key": key, "count": count, "level": level}
            for key, count, level in activity_heatmap(counts, today_key, HEATMAP_DAYS)
        ],
        "movement_totals": movement_totals(last_7),
        "stale_movements": stale_movements,
    }
