"""Configuration models and helpers for the logout calculator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

DEFAULT_WORK_HOURS = 6.0
DEFAULT_BREAK_MINUTES = 0


@dataclass(slots=True)
class CalculatorSettings:
    """Inputs that shape every calculation besides the log itself."""

    required_work_hours: float = DEFAULT_WORK_HOURS
    break_minutes: int = DEFAULT_BREAK_MINUTES
    refresh_interval: timedelta = timedelta(seconds=30)
    min_gap_minutes: float = 5.0

    @property
    def required_work_minutes(self) -> float:
        return self.required_work_hours * 60

    @classmethod
    def from_inputs(
        cls,
        work_hours: Any = None,
        break_minutes: Any = None,
        refresh_seconds: float | None = None,
        min_gap_minutes: float | None = None,
    ) -> "CalculatorSettings":
        return cls(
            required_work_hours=coerce_work_hours(work_hours),
            break_minutes=coerce_break_minutes(break_minutes),
            refresh_interval=timedelta(
                seconds=refresh_seconds if refresh_seconds is not None else 30.0
            ),
            min_gap_minutes=min_gap_minutes if min_gap_minutes is not None else 5.0,
        )


def coerce_work_hours(value: Any) -> float:
    """Read a required-hours field, falling back to 6 for blank or unusable values."""
    try:
        hours = float(str(value).strip()) if value is not None else 0.0
    except ValueError:
        return DEFAULT_WORK_HOURS
    if hours != hours or hours <= 0 or hours == float("inf"):
        return DEFAULT_WORK_HOURS
    return hours


def coerce_break_minutes(value: Any) -> int:
    """Read a break allowance in whole minutes, falling back to 0."""
    if value is None:
        return DEFAULT_BREAK_MINUTES
    try:
        minutes = int(float(str(value).strip()))
    except (ValueError, OverflowError):
        return DEFAULT_BREAK_MINUTES
    return max(DEFAULT_BREAK_MINUTES, minutes)
