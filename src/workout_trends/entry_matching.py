"""Same-day merge matching for repeated logs of one movement."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .calendar_keys import to_date_key
from .models import Entry


def normalize_movement_name(name: Any) -> str:
    """Trim and collapse whitespace runs; casing is kept."""
    if name is None:
        return ""
    return " ".join(str(name).split())


def movement_key(name: Any) -> str:
    """Comparison key for a movement name. Never stored."""
    return normalize_movement_name(name).casefold()


def find_matching_day_entry(
    entries: Iterable[Entry],
    reference: Entry,
    exclude_id: str | None = None,
    *,
    timezone_name: str | None = None,
) -> Entry | None:
    """First entry on the same local day with the same mode, type and movement.

    ``exclude_id`` skips one entry, so an entry being edited never matches
    itself. With more than one candidate the first in iteration order wins.
    """
    target_date = to_date_key(reference.timestamp, timezone_name=timezone_name)
    target_movement = movement_key(reference.movement)

    for entry in entries:
        if exclude_id and entry.id == exclude_id:
            continue
        if (
            entry.mode == reference.mode
            and entry.movement_type == reference.movement_type
            and movement_key(entry.movement) == target_movement
            and to_date_key(entry.timestamp, timezone_name=timezone_name) == target_date
        ):
            return entry
    return None


def merge_entry_amounts(target: Entry, source: Entry) -> Entry:
    """Return ``target`` with ``source``'s amount added and the later timestamp.

    Additive: merging the same source twice counts it twice.
    """
    return target.model_copy(
        update={
            "amount": target.amount + source.amount,
            "timestamp": max(target.timestamp, source.timestamp),
        }
    )
