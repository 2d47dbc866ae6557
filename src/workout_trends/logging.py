"""Log output for a workout session.

``setup_logging`` is called once by ``start_session`` with the session's
``Config``: ``log_format`` picks JSON lines or plain text, ``log_level`` the
threshold. Both formats carry the ``workout_*`` extras the engine attaches to
its records (entry counts, today's DateKey, timezone).
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

from .config import Config

EXTRA_PREFIX = "workout_"

_HANDLER_NAME = "workout_trends"


def workout_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key.startswith(EXTRA_PREFIX)
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
        }
        if record.exc_info and record.exc_info[1] is not None:
            payload["exception"] = "".join(traceback.format_exception(*record.exc_info))
        payload.update(workout_extras(record))
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Plain lines with the workout extras appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = workout_extras(record)
        if not extras:
            return line
        return line + " " + " ".join(f"{key}={value}" for key, value in sorted(extras.items()))


def setup_logging(config: Config) -> logging.Handler:
    """Install the session's stderr handler on the root logger.

    Calling it again swaps the previous session handler; handlers installed
    by anyone else are left alone.
    """
    root = logging.getLogger()
    root.setLevel(config.log_level)

    for existing in root.handlers[:]:
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(config.log_level)
    handler.setFormatter(JSONFormatter() if config.log_format == "json" else TextFormatter())
    root.addHandler(handler)
    return handler
