"""Validation boundary between the stored entry log and the analytics.

The stored log is a JSON array of camelCase entry records. Malformed records
are dropped here, one by one, so the analytics only ever see valid entries.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from .models import Entry

logger = logging.getLogger(__name__)


def validate_entry(payload: Any) -> Entry:
    """Validate one stored record. Raises ``pydantic.ValidationError``."""
    if isinstance(payload, Entry):
        return payload
    return Entry.model_validate(payload)


def validate_entries(records: Iterable[Any]) -> list[Entry]:
    """Keep the valid records, in order, and log the ones skipped."""
    entries: list[Entry] = []
    skipped = 0
    for index, record in enumerate(records):
        try:
            entries.append(validate_entry(record))
        except ValidationError as exc:
            skipped += 1
            logger.warning(
                "Skipping stored entry %d: %d validation error(s): %s",
                index,
                exc.error_count(),
                "; ".join(
                    f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}"
                    for err in exc.errors()
                ),
            )

    if skipped:
        logger.info("Loaded %d stored entries, skipped %d invalid", len(entries), skipped)
    return entries


def load_entries(raw: str | bytes | None) -> list[Entry]:
    """Parse the stored JSON log. Anything unreadable yields an empty log."""
    if not raw:
        return []

    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning("Stored entry log is not valid JSON: %s", exc)
        return []

    if not isinstance(parsed, list):
        logger.warning(
            "Stored entry log must be a JSON array, got %s", type(parsed).__name__
        )
        return []

    return validate_entries(parsed)


def dump_entries(entries: Iterable[Entry]) -> str:
    return json.dumps([entry.model_dump(by_alias=True) for entry in entries])
