"""Domain models for extracted timestamps and derived schedules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

WORK = "work"
BREAK = "break"


@dataclass(slots=True, frozen=True)
class TimeToken:
    """A time of day read from a log line, already normalized to 24-hour form."""

    hour: int
    minute: int
    second: int
    meridiem: Optional[str] = None


@dataclass(slots=True, frozen=True)
class DateToken:
    """A calendar date read from a log line; the day is not checked against the month."""

    day: int
    month: int
    year: int


@dataclass(slots=True)
class Period:
    """A contiguous span of work or break time."""

    kind: str
    start: datetime
    end: datetime
    duration_minutes: float
    ongoing: bool = False

    @classmethod
    def between(
        cls, kind: str, start: datetime, end: datetime, ongoing: bool = False
    ) -> "Period":
        # Out-of-order input never yields a negative span.
        end = max(start, end)
        minutes = (end - start).total_seconds() / 60.0
        return cls(kind=kind, start=start, end=end, duration_minutes=minutes, ongoing=ongoing)


@dataclass(slots=True)
class Breakdown:
    work_periods: list[Period] = field(default_factory=list)
    breaks: list[Period] = field(default_factory=list)
    total_break_minutes: int = 0
    active_minutes: int = 0


@dataclass(slots=True)
class ScheduleResult:
    """Everything a caller needs to render a logout estimate."""

    mode: str
    login: datetime
    now: datetime
    projected_logout: datetime
    active_minutes: float
    total_break_minutes: float
    remaining_minutes: float
    total_office_minutes: float
    progress_percent: float
    is_complete: bool
    work_periods: list[Period] = field(default_factory=list)
    breaks: list[Period] = field(default_factory=list)

    @property
    def break_count(self) -> int:
        if self.mode == "manual":
            return 1 if self.total_break_minutes > 0 else 0
        return len(self.breaks)


@dataclass(slots=True)
class HistoryEntry:
    """A saved calculation, as shown in the history table."""

    id: Optional[int]
    date_label: str
    active_hours: str
    break_minutes: int
    logout_time: str
    created_at: Optional[datetime] = None
