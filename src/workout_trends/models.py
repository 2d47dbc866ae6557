"""Workout entry model and the value types the analytics return.

Entries arrive from the stored log in camelCase (``movementType``); older logs
used the plural movement types ``stretches``/``exercises``, which are folded
into the singular values here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

METRICS: tuple[str, ...] = ("time", "reps")
MOVEMENT_TYPES: tuple[str, ...] = ("stretch", "exercise")

_LEGACY_MOVEMENT_TYPES = {
    "stretches": "stretch",
    "exercises": "exercise",
}

Metric = Literal["time", "reps"]
MovementType = Literal["stretch", "exercise"]


class Entry(BaseModel):
    """One logged workout record. ``amount`` is seconds for time, count for reps."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    timestamp: int = Field(strict=True)  # epoch milliseconds
    movement: str
    movement_type: MovementType = Field(alias="movementType")
    mode: Metric
    amount: int = Field(gt=0, strict=True)

    @field_validator("movement_type", mode="before")
    @classmethod
    def normalize_movement_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            normalized = value.strip().lower()
            return _LEGACY_MOVEMENT_TYPES.get(normalized, normalized)
        return value


@dataclass(frozen=True)
class TrendPoint:
    """Adjusted average of the window ending on ``date_key``."""

    date_key: str
    value: float


@dataclass(frozen=True)
class StreakStats:
    current_streak: int
    longest_streak: int
    active_days: int
