"""Entry log state transitions.

Every operation on the log is a pure function ``(state, ...) -> Transition``.
A transition carries the next state plus the effects the caller should run:
persisting the log, arming a delayed task or cancelling one. Callers pass the
current time and fresh ids in; nothing here reads the clock.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from .daily_totals import newest_entry
from .entry_matching import find_matching_day_entry, merge_entry_amounts
from .models import Entry

UNDO_EXPIRY = "undo-expiry"
ADDED_HIGHLIGHT = "added-highlight"

UNDO_WINDOW_SECONDS = 10.0
HIGHLIGHT_SECONDS = 0.9


@dataclass(frozen=True)
class EntryDraft:
    """What the composer holds before an entry is saved."""

    movement: str
    movement_type: str
    mode: str
    amount: int

    def is_complete(self) -> bool:
        return bool(self.movement and self.movement.strip()) and self.amount > 0


@dataclass(frozen=True)
class DeletedEntry:
    entry: Entry
    index: int


@dataclass(frozen=True)
class LogState:
    entries: tuple[Entry, ...] = ()
    editing_entry_id: str | None = None
    last_deleted: DeletedEntry | None = None
    last_added_entry_id: str | None = None


@dataclass(frozen=True)
class PersistEntries:
    entries: tuple[Entry, ...]


@dataclass(frozen=True)
class ScheduleTask:
    purpose: str
    delay_seconds: float


@dataclass(frozen=True)
class CancelTask:
    purpose: str


Effect = PersistEntries | ScheduleTask | CancelTask


@dataclass(frozen=True)
class Transition:
    state: LogState
    effects: tuple[Effect, ...] = ()


def _find(entries: tuple[Entry, ...], entry_id: str | None) -> Entry | None:
    if entry_id is None:
        return None
    return next((entry for entry in entries if entry.id == entry_id), None)


def _replace_entry(entries: tuple[Entry, ...], updated: Entry) -> tuple[Entry, ...]:
    return tuple(updated if entry.id == updated.id else entry for entry in entries)


def _absorb(
    state: LogState,
    incoming: Entry,
    *,
    timezone_name: str | None,
    highlight_seconds: float,
) -> Transition:
    """Merge ``incoming`` into its same-day match or append it, then highlight."""
    existing = find_matching_day_entry(state.entries, incoming, timezone_name=timezone_name)
    if existing is not None:
        entries = _replace_entry(state.entries, merge_entry_amounts(existing, incoming))
        highlighted_id = existing.id
    else:
        entries = state.entries + (incoming,)
        highlighted_id = incoming.id

    return Transition(
        state=replace(state, entries=entries, last_added_entry_id=highlighted_id),
        effects=(
            PersistEntries(entries),
            ScheduleTask(ADDED_HIGHLIGHT, highlight_seconds),
        ),
    )


def log_entry(
    state: LogState,
    draft: EntryDraft,
    *,
    now_ms: int,
    new_id: str,
    timezone_name: str | None = None,
    highlight_seconds: float = HIGHLIGHT_SECONDS,
) -> Transition:
    """Record a new entry, folding it into today's matching entry if there is one."""
    if not draft.is_complete():
        return Transition(state)

    entry = Entry(
        id=new_id,
        timestamp=now_ms,
        movement=draft.movement,
        movement_type=draft.movement_type,
        mode=draft.mode,
        amount=draft.amount,
    )
    return _absorb(state, entry, timezone_name=timezone_name, highlight_seconds=highlight_seconds)


def begin_edit(state: LogState, entry_id: str) -> Transition:
    if _find(state.entries, entry_id) is None:
        return Transition(state)
    return Transition(replace(state, editing_entry_id=entry_id))


def cancel_edit(state: LogState) -> Transition:
    return Transition(replace(state, editing_entry_id=None))


def save_edit(
    state: LogState,
    draft: EntryDraft,
    *,
    timezone_name: str | None = None,
) -> Transition:
    """Apply ``draft`` to the entry being edited.

    If the edited entry now matches another entry of the same day, the other
    entry absorbs it and the edited one disappears.
    """
    current = _find(state.entries, state.editing_entry_id)
    if current is None or not draft.is_complete():
        return Transition(state)

    edited = Entry(
        id=current.id,
        timestamp=current.timestamp,
        movement=draft.movement,
        movement_type=draft.movement_type,
        mode=draft.mode,
        amount=draft.amount,
    )
    entries = _replace_entry(state.entries, edited)

    merge_target = find_matching_day_entry(
        entries, edited, exclude_id=edited.id, timezone_name=timezone_name
    )
    if merge_target is not None:
        merged = merge_entry_amounts(merge_target, edited)
        entries = tuple(
            merged if entry.id == merged.id else entry
            for entry in entries
            if entry.id != edited.id
        )

    return Transition(
        state=replace(state, entries=entries, editing_entry_id=None),
        effects=(PersistEntries(entries),),
    )


def delete_entry(
    state: LogState,
    entry_id: str,
    *,
    undo_seconds: float = UNDO_WINDOW_SECONDS,
) -> Transition:
    """Remove an entry and keep it around for undo until the window expires."""
    index = next((i for i, entry in enumerate(state.entries) if entry.id == entry_id), None)
    if index is None:
        return Transition(state)

    removed = state.entries[index]
    entries = state.entries[:index] + state.entries[index + 1:]
    editing_entry_id = None if state.editing_entry_id == entry_id else state.editing_entry_id

    return Transition(
        state=replace(
            state,
            entries=entries,
            editing_entry_id=editing_entry_id,
            last_deleted=DeletedEntry(entry=removed, index=index),
        ),
        effects=(
            PersistEntries(entries),
            ScheduleTask(UNDO_EXPIRY, undo_seconds),
        ),
    )


def undo_delete(state: LogState, *, timezone_name: str | None = None) -> Transition:
    """Bring back the last deleted entry.

    If an entry logged since then matches it, the amounts are merged instead
    of restoring a duplicate. Otherwise it goes back to its old position,
    clamped to the current log length.
    """
    if state.last_deleted is None:
        return Transition(state)

    restored = state.last_deleted.entry
    existing = find_matching_day_entry(state.entries, restored, timezone_name=timezone_name)
    if existing is not None:
        entries = _replace_entry(state.entries, merge_entry_amounts(existing, restored))
    else:
        index = max(0, min(state.last_deleted.index, len(state.entries)))
        entries = state.entries[:index] + (restored,) + state.entries[index:]

    return Transition(
        state=replace(state, entries=entries, last_deleted=None),
        effects=(PersistEntries(entries), CancelTask(UNDO_EXPIRY)),
    )


def expire_undo(state: LogState) -> Transition:
    return Transition(replace(state, last_deleted=None))


def clear_highlight(state: LogState) -> Transition:
    return Transition(replace(state, last_added_entry_id=None))


def duplicate_last_entry(
    state: LogState,
    *,
    now_ms: int,
    new_id: str,
    timezone_name: str | None = None,
    highlight_seconds: float = HIGHLIGHT_SECONDS,
) -> Transition:
    """Log the newest entry again, stamped ``now_ms``."""
    newest = newest_entry(state.entries)
    if newest is None:
        return Transition(state)

    clone = newest.model_copy(update={"id": new_id, "timestamp": now_ms})
    return _absorb(state, clone, timezone_name=timezone_name, highlight_seconds=highlight_seconds)


def quick_add_set(
    state: LogState,
    entry_id: str,
    *,
    now_ms: int,
    new_id: str,
    timezone_name: str | None = None,
    highlight_seconds: float = HIGHLIGHT_SECONDS,
) -> Transition:
    """Log another set identical to ``entry_id``, stamped ``now_ms``."""
    source = _find(state.entries, entry_id)
    if source is None:
        return Transition(state)

    clone = source.model_copy(update={"id": new_id, "timestamp": now_ms})
    return _absorb(state, clone, timezone_name=timezone_name, highlight_seconds=highlight_seconds)
