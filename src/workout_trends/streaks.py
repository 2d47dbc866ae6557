"""Daily habit streaks and the activity heatmap."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .calendar_keys import coerce_date_key, last_n_days_keys, shift_date_key
from .daily_totals import daily_entry_counts
from .models import Entry, StreakStats


def _active_keys(active_date_keys: Iterable[str] | Mapping[str, Any]) -> set[str]:
    if isinstance(active_date_keys, Mapping):
        return {key for key, value in active_date_keys.items() if value}
    return set(active_date_keys)


def compute_streak_stats(
    active_date_keys: Iterable[str] | Mapping[str, Any],
    today_key: str,
) -> StreakStats:
    """Compute current/longest daily streaks and the active-day count.

    ``active_date_keys`` is either the DateKeys with at least one entry or a
    mapping of DateKey -> count (zero counts are ignored). The current streak
    walks backwards from ``today_key`` and stops at the first empty day, so a
    day without entries today means a current streak of 0.
    """
    active = _active_keys(active_date_keys)
    if not active:
        return StreakStats(current_streak=0, longest_streak=0, active_days=0)

    current_streak = 0
    cursor = today_key
    while cursor in active:
        current_streak += 1
        cursor = shift_date_key(cursor, -1)

    longest_streak = 0
    current_run = 0
    previous: str | None = None
    for key in sorted(active):
        if previous is not None and shift_date_key(previous, 1) == key:
            current_run += 1
        else:
            current_run = 1
        longest_streak = max(longest_streak, current_run)
        previous = key

    return StreakStats(
        current_streak=current_streak,
        longest_streak=longest_streak,
        active_days=len(active),
    )


def streak_stats_for_entries(
    entries: Iterable[Entry],
    today: Any,
    *,
    timezone_name: str | None = None,
) -> StreakStats:
    today_key = coerce_date_key(today, timezone_name=timezone_name)
    counts = daily_entry_counts(entries, timezone_name=timezone_name)
    return compute_streak_stats(counts, today_key)


def heatmap_level(count: int, max_count: int) -> int:
    """Bucket a day's entry count into intensity levels 0-4."""
    if count <= 0 or max_count <= 0:
        return 0
    ratio = count / max_count
    if ratio <= 0.25:
        return 1
    if ratio <= 0.5:
        return 2
    if ratio <= 0.75:
        return 3
    return 4


def activity_heatmap(
    counts: Mapping[str, int],
    today_key: str,
    days: int = 56,
) -> list[tuple[str, int, int]]:
    """``(date_key, count, level)`` for the trailing ``days`` days, oldest first.

    Levels are relative to the busiest day across all of ``counts``, not just
    the displayed window.
    """
    max_count = max(counts.values(), default=0)
    cells = []
    for key in last_n_days_keys(days, today_key):
        count = counts.get(key, 0)
        cells.append((key, count, heatmap_level(count, max_count)))
    return cells
