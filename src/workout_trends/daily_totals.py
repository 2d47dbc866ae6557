"""Fold raw entries into per-day metric totals and related day-level views."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Sequence

from .calendar_keys import shift_date_key, to_date_key
from .models import METRICS, Entry


def _empty_totals() -> dict[str, int]:
    return {metric: 0 for metric in METRICS}


def build_daily_totals(
    entries: Iterable[Entry],
    *,
    timezone_name: str | None = None,
) -> dict[str, dict[str, int]]:
    """Sum ``amount`` per DateKey and mode. Days without entries are absent."""
    totals_by_day: dict[str, dict[str, int]] = defaultdict(_empty_totals)

    for entry in entries:
        day = totals_by_day[to_date_key(entry.timestamp, timezone_name=timezone_name)]
        if entry.mode in day:
            day[entry.mode] += entry.amount

    return dict(totals_by_day)


def first_tracked_date_key(
    entries: Iterable[Entry],
    *,
    timezone_name: str | None = None,
) -> str | None:
    earliest: str | None = None
    for entry in entries:
        key = to_date_key(entry.timestamp, timezone_name=timezone_name)
        if earliest is None or key < earliest:
            earliest = key
    return earliest


def daily_entry_counts(
    entries: Iterable[Entry],
    *,
    timezone_name: str | None = None,
) -> dict[str, int]:
    counts: dict[str, int] = defaultdict(int)
    for entry in entries:
        counts[to_date_key(entry.timestamp, timezone_name=timezone_name)] += 1
    return dict(counts)


def summarize_entries(entries: Iterable[Entry]) -> dict[str, int]:
    """Total seconds and reps across ``entries``."""
    totals = _empty_totals()
    for entry in entries:
        if entry.mode in totals:
            totals[entry.mode] += entry.amount
    return totals


def entries_within_days(
    entries: Iterable[Entry],
    days: int,
    today_key: str,
    *,
    timezone_name: str | None = None,
) -> list[Entry]:
    if days <= 0:
        return []
    start_key = shift_date_key(today_key, -(days - 1))
    return [
        entry
        for entry in entries
        if start_key <= to_date_key(entry.timestamp, timezone_name=timezone_name) <= today_key
    ]


def group_entries_by_day(
    entries: Iterable[Entry],
    *,
    timezone_name: str | None = None,
) -> list[tuple[str, list[Entry]]]:
    """Entries grouped per DateKey, newest day first, input order inside a day."""
    groups: dict[str, list[Entry]] = defaultdict(list)
    for entry in entries:
        groups[to_date_key(entry.timestamp, timezone_name=timezone_name)].append(entry)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)


def newest_entry(entries: Sequence[Entry]) -> Entry | None:
    newest: Entry | None = None
    for entry in entries:
        if newest is None or entry.timestamp > newest.timestamp:
            newest = entry
    return newest
