"""Holds the current log state and runs transition effects.

The session owns the only mutable reference to the state. Every action goes
through a pure transition in ``log_state``; persistence and timers happen
here, behind ``apply_effects``.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable

from . import log_state
from .config import Config
from .entry_contract import load_entries
from .log_state import ADDED_HIGHLIGHT, UNDO_EXPIRY, EntryDraft, LogState, Transition
from .logging import setup_logging
from .models import Entry
from .task_scheduler import KeyedTaskScheduler, apply_effects

logger = logging.getLogger(__name__)


def new_entry_id() -> str:
    return str(uuid.uuid4())


class LogSession:
    def __init__(
        self,
        state: LogState,
        *,
        persist: Callable[[tuple[Entry, ...]], None],
        scheduler: KeyedTaskScheduler,
        config: Config | None = None,
        id_factory: Callable[[], str] = new_entry_id,
        on_change: Callable[[LogState], None] | None = None,
    ) -> None:
        self.state = state
        self.config = config or Config()
        self._persist = persist
        self._scheduler = scheduler
        self._id_factory = id_factory
        self._on_change = on_change
        self._callbacks = {
            UNDO_EXPIRY: lambda: self._dispatch(log_state.expire_undo(self.state)),
            ADDED_HIGHLIGHT: lambda: self._dispatch(log_state.clear_highlight(self.state)),
        }

    def _dispatch(self, transition: Transition) -> LogState:
        changed = transition.state is not self.state
        if transition.effects:
            logger.debug("Applying %d effect(s)", len(transition.effects))
        self.state = transition.state
        apply_effects(
            transition.effects,
            persist=self._persist,
            scheduler=self._scheduler,
            callbacks=self._callbacks,
        )
        if changed and self._on_change is not None:
            self._on_change(self.state)
        return self.state

    def log(self, draft: EntryDraft, *, now_ms: int) -> LogState:
        return self._dispatch(
            log_state.log_entry(
                self.state,
                draft,
                now_ms=now_ms,
                new_id=self._id_factory(),
                timezone_name=self.config.timezone,
                highlight_seconds=self.config.highlight_seconds,
            )
        )

    def begin_edit(self, entry_id: str) -> LogState:
        return self._dispatch(log_state.begin_edit(self.state, entry_id))

    def cancel_edit(self) -> LogState:
        return self._dispatch(log_state.cancel_edit(self.state))

    def save_edit(self, draft: EntryDraft) -> LogState:
        return self._dispatch(
            log_state.save_edit(self.state, draft, timezone_name=self.config.timezone)
        )

    def delete(self, entry_id: str) -> LogState:
        return self._dispatch(
            log_state.delete_entry(self.state, entry_id, undo_seconds=self.config.undo_seconds)
        )

    def undo_delete(self) -> LogState:
        return self._dispatch(
            log_state.undo_delete(self.state, timezone_name=self.config.timezone)
        )

    def duplicate_last(self, *, now_ms: int) -> LogState:
        return self._dispatch(
            log_state.duplicate_last_entry(
                self.state,
                now_ms=now_ms,
                new_id=self._id_factory(),
                timezone_name=self.config.timezone,
                highlight_seconds=self.config.highlight_seconds,
            )
        )

    def quick_add_set(self, entry_id: str, *, now_ms: int) -> LogState:
        return self._dispatch(
            log_state.quick_add_set(
                self.state,
                entry_id,
                now_ms=now_ms,
                new_id=self._id_factory(),
                timezone_name=self.config.timezone,
                highlight_seconds=self.config.highlight_seconds,
            )
        )

    def close(self) -> None:
        self._scheduler.cancel_all()


def start_session(
    raw_log: str | bytes | None,
    *,
    persist: Callable[[tuple[Entry, ...]], None],
    config: Config | None = None,
    loop: asyncio.AbstractEventLoop | None = None,
    on_change: Callable[[LogState], None] | None = None,
) -> LogSession:
    """Configure logging, load the stored log and open a session over it.

    ``config`` defaults to ``Config.from_env()``. Needs ``loop`` or a running
    event loop for the undo and highlight timers.
    """
    config = config or Config.from_env()
    setup_logging(config)

    entries = load_entries(raw_log)
    session = LogSession(
        LogState(entries=tuple(entries)),
        persist=persist,
        scheduler=KeyedTaskScheduler(loop),
        config=config,
        on_change=on_change,
    )
    logger.info(
        "Workout log session started with %d entries",
        len(entries),
        extra={
            "workout_entry_count": len(entries),
            "workout_timezone": config.timezone or "local",
        },
    )
    return session
