"""Calendar-day keys for local-time grouping.

A DateKey is a zero-padded ``YYYY-MM-DD`` string for one local calendar day.
Lexicographic order equals chronological order, so keys can be compared and
sorted directly.

"Local" means the IANA zone passed as ``timezone_name`` or, when that is
``None``, the host's local zone.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def normalize_timezone_name(value: Any) -> str | None:
    """Normalize a timezone preference and verify it's a valid IANA name."""
    if not isinstance(value, str):
        return None
    raw = value.strip()
    if not raw:
        return None
    if raw.upper() == "UTC":
        return "UTC"
    try:
        ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError):
        return None
    return raw


def to_local_datetime(timestamp: Any, *, timezone_name: str | None = None) -> datetime:
    """Project an epoch-millisecond timestamp (or datetime) into local wall time.

    Naive datetimes are taken as already local.
    """
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            return timestamp
        if timezone_name:
            return timestamp.astimezone(ZoneInfo(timezone_name))
        return timestamp.astimezone()

    seconds = float(timestamp) / 1000.0
    if timezone_name:
        return datetime.fromtimestamp(seconds, tz=ZoneInfo(timezone_name))
    return datetime.fromtimestamp(seconds)


def to_date_key(timestamp: Any, *, timezone_name: str | None = None) -> str:
    return to_local_datetime(timestamp, timezone_name=timezone_name).date().isoformat()


def date_from_key(date_key: str) -> date:
    if not isinstance(date_key, str) or not _DATE_KEY_RE.match(date_key):
        raise ValueError(f"date key must look like YYYY-MM-DD, got {date_key!r}")
    return date.fromisoformat(date_key)


def parse_date_key(date_key: str, *, timezone_name: str | None = None) -> datetime:
    """Return the first local instant of the day named by ``date_key``.

    In zones whose DST gap swallows midnight the day starts at the end of the
    gap (01:00 for a one-hour jump).
    """
    day = date_from_key(date_key)
    midnight = datetime(day.year, day.month, day.day)
    if timezone_name:
        zone = ZoneInfo(timezone_name)
        # Round trip through UTC so a nonexistent wall time lands on a real instant.
        return midnight.replace(tzinfo=zone).astimezone(timezone.utc).astimezone(zone)
    return midnight


def coerce_date_key(value: Any, *, timezone_name: str | None = None) -> str:
    """Accept a DateKey, a ``date``, a datetime or epoch millis and return a DateKey."""
    if isinstance(value, str):
        return date_from_key(value).isoformat()
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.isoformat()
    return to_date_key(value, timezone_name=timezone_name)


def shift_date_key(date_key: str, delta_days: int) -> str:
    # Calendar arithmetic on dates, so DST transitions never skip or repeat a day.
    return (date_from_key(date_key) + timedelta(days=delta_days)).isoformat()


def range_keys(start_date_key: str | None, end_date_key: str | None) -> list[str]:
    """Every DateKey from start to end inclusive; empty when start is after end."""
    if not start_date_key or not end_date_key or start_date_key > end_date_key:
        return []

    cursor = date_from_key(start_date_key)
    end = date_from_key(end_date_key)
    keys = []
    while cursor <= end:
        keys.append(cursor.isoformat())
        cursor += timedelta(days=1)
    return keys


def week_bucket_key(date_key: str) -> str:
    """Sunday DateKey of the Sunday-Saturday week containing ``date_key``.

    The partial first week of the calendar (before 0001-01-07) buckets under
    ``date.min``.
    """
    day = date_from_key(date_key)
    # date.weekday(): Monday=0 .. Sunday=6
    offset = min((day.weekday() + 1) % 7, (day - date.min).days)
    return (day - timedelta(days=offset)).isoformat()


def full_day_difference(start_date_key: str | None, end_date_key: str | None) -> int:
    """Whole calendar days from start to end, never negative."""
    if not start_date_key or not end_date_key:
        return 0
    delta = date_from_key(end_date_key) - date_from_key(start_date_key)
    return max(0, delta.days)


def last_n_days_keys(days: int, today_key: str) -> list[str]:
    """Trailing ``days``-day window ending ``today_key``, oldest first."""
    if days <= 0:
        return []
    return range_keys(shift_date_key(today_key, -(days - 1)), today_key)
