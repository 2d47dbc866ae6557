"""Per-movement history: log counts, last-logged day and stale highlights."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .calendar_keys import full_day_difference, to_date_key
from .entry_matching import movement_key, normalize_movement_name
from .models import MOVEMENT_TYPES, Entry


def build_movement_history(
    entries: Iterable[Entry],
    *,
    timezone_name: str | None = None,
) -> dict[str, dict[str, dict[str, Any]]]:
    """Group entries by movement type and normalized movement key.

    Each record holds ``count`` (number of entries) and
    ``last_logged_date_key``.
    """
    history: dict[str, dict[str, dict[str, Any]]] = {
        movement_type: {} for movement_type in MOVEMENT_TYPES
    }

    for entry in entries:
        if entry.movement_type not in history:
            continue
        key = movement_key(entry.movement)
        if not key:
            continue

        date_key = to_date_key(entry.timestamp, timezone_name=timezone_name)
        record = history[entry.movement_type].setdefault(
            key, {"count": 0, "last_logged_date_key": None}
        )
        record["count"] += 1
        if record["last_logged_date_key"] is None or date_key > record["last_logged_date_key"]:
            record["last_logged_date_key"] = date_key

    return history


def select_stale_movements(
    movement_history: Mapping[str, Mapping[str, Any]] | None,
    visible_movement_names: Iterable[str] | None,
    today_key: str,
    *,
    min_logs: int = 3,
    stale_after_days: int = 5,
    max_highlights: int = 3,
) -> set[str]:
    """Movement keys worth nudging: logged often, but not recently.

    A movement qualifies with at least ``min_logs`` logs and a last log more
    than ``stale_after_days`` days before ``today_key``. When visible names
    are given only those movements are considered. The stalest come first,
    then the earliest last-logged day, then the key; at most
    ``max_highlights`` are kept.
    """
    visible_keys = {
        key for key in (movement_key(name) for name in (visible_movement_names or [])) if key
    }

    candidates = []
    for key, record in (movement_history or {}).items():
        if visible_keys and key not in visible_keys:
            continue
        last_logged = (record or {}).get("last_logged_date_key")
        count = (record or {}).get("count")
        if not last_logged or not isinstance(count, int):
            continue
        if count < min_logs:
            continue
        days_since = full_day_difference(last_logged, today_key)
        if days_since > stale_after_days:
            candidates.append((-days_since, last_logged, key))

    candidates.sort()
    return {key for _, _, key in candidates[:max(0, max_highlights)]}


def movement_totals(entries: Iterable[Entry]) -> list[dict[str, Any]]:
    """Per-movement totals, most logged first, then most time.

    Spelling variants of one movement are pooled; the first spelling seen is
    reported.
    """
    rows: dict[str, dict[str, Any]] = {}
    for entry in entries:
        key = movement_key(entry.movement)
        row = rows.setdefault(
            key,
            {"movement": normalize_movement_name(entry.movement), "time": 0, "reps": 0, "logs": 0},
        )
        row["logs"] += 1
        if entry.mode in ("time", "reps"):
            row[entry.mode] += entry.amount

    return sorted(rows.values(), key=lambda row: (-row["logs"], -row["time"]))
