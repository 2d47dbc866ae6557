import logging
import os
from dataclasses import dataclass

from .calendar_keys import normalize_timezone_name

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int, *, minimum: int = 1) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(minimum, int(raw))
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default


def _env_timezone(name: str) -> str | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    normalized = normalize_timezone_name(raw)
    if normalized is None:
        logger.warning("Ignoring %s=%r: unknown timezone, using host local time", name, raw)
    return normalized


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value not in choices:
        logger.warning("Ignoring %s=%r: expected one of %s, using %s", name, raw, "/".join(choices), default)
        return default
    return value


def _env_log_level(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    level = logging.getLevelNamesMapping().get(raw.strip().upper())
    if level is None:
        logger.warning("Ignoring %s=%r: unknown log level, using %s", name, raw, logging.getLevelName(default))
        return default
    return level


@dataclass(frozen=True)
class Config:
    timezone: str | None = None
    log_format: str = "json"
    log_level: int = logging.INFO
    trend_window_days: int = 7
    chart_days: int = 14
    baseline_lookback_days: int = 7
    undo_seconds: float = 10.0
    highlight_seconds: float = 0.9
    stale_min_logs: int = 3
    stale_after_days: int = 5
    stale_max_highlights: int = 3

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            timezone=_env_timezone("WORKOUT_TIMEZONE"),
            log_format=_env_choice("WORKOUT_LOG_FORMAT", "json", ("json", "text")),
            log_level=_env_log_level("WORKOUT_LOG_LEVEL", logging.INFO),
            trend_window_days=_env_int("WORKOUT_TREND_WINDOW_DAYS", 7),
            chart_days=_env_int("WORKOUT_CHART_DAYS", 14),
            baseline_lookback_days=_env_int("WORKOUT_BASELINE_LOOKBACK_DAYS", 7),
            undo_seconds=_env_float("WORKOUT_UNDO_SECONDS", 10.0),
            highlight_seconds=_env_float("WORKOUT_HIGHLIGHT_SECONDS", 0.9),
            stale_min_logs=_env_int("WORKOUT_STALE_MIN_LOGS", 3),
            stale_after_days=_env_int("WORKOUT_STALE_AFTER_DAYS", 5, minimum=0),
            stale_max_highlights=_env_int("WORKOUT_STALE_MAX_HIGHLIGHTS", 3, minimum=0),
        )
