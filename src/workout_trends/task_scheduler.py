"""Delayed tasks keyed by purpose.

At most one task per purpose is pending: scheduling a purpose again cancels
the earlier task first. Runs on the asyncio event loop, so plain dicts are
safe without locking.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping

from .log_state import CancelTask, Effect, PersistEntries, ScheduleTask

logger = logging.getLogger(__name__)


class KeyedTaskScheduler:
    """Pending delayed tasks, one per purpose, on a single event loop.

    The loop is bound at construction: pass one explicitly or build the
    scheduler inside a running loop. Without either this raises
    ``RuntimeError`` up front, before any session action has persisted.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._handles: dict[str, asyncio.TimerHandle] = {}

    def schedule(
        self,
        purpose: str,
        delay_seconds: float,
        callback: Callable[[], None],
    ) -> asyncio.TimerHandle:
        """Run ``callback`` after ``delay_seconds``, replacing any pending task for ``purpose``."""
        if self.cancel(purpose):
            logger.debug("Replaced pending %s task", purpose)

        handle = self._loop.call_later(
            max(0.0, delay_seconds), self._fire, purpose, callback
        )
        self._handles[purpose] = handle
        return handle

    def _fire(self, purpose: str, callback: Callable[[], None]) -> None:
        self._handles.pop(purpose, None)
        callback()

    def cancel(self, purpose: str) -> bool:
        handle = self._handles.pop(purpose, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for purpose in list(self._handles):
            self.cancel(purpose)

    def pending(self, purpose: str) -> bool:
        return purpose in self._handles


def apply_effects(
    effects: Iterable[Effect],
    *,
    persist: Callable[[tuple], None],
    scheduler: KeyedTaskScheduler,
    callbacks: Mapping[str, Callable[[], None]],
) -> None:
    """Run a transition's effects in order."""
    for effect in effects:
        if isinstance(effect, PersistEntries):
            persist(effect.entries)
        elif isinstance(effect, ScheduleTask):
            callback = callbacks.get(effect.purpose)
            if callback is None:
                raise KeyError(f"no callback registered for task purpose {effect.purpose!r}")
            scheduler.schedule(effect.purpose, effect.delay_seconds, callback)
        elif isinstance(effect, CancelTask):
            scheduler.cancel(effect.purpose)
        else:
            raise TypeError(f"unknown effect: {effect!r}")
