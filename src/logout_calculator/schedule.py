"""Turn extracted instants or manual inputs into a work schedule and logout estimate."""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from .config import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_WORK_HOURS,
    CalculatorSettings,
    coerce_break_minutes,
    coerce_work_hours,
)
from .models import BREAK, WORK, Breakdown, Period, ScheduleResult
from .parsing import extract_timestamps

logger = logging.getLogger(__name__)

ALTERNATING = "alternating"
GAPS = "gaps"

_LOGIN_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


class NoTimestampsError(ValueError):
    """Raised when a non-empty log yields no usable timestamps."""

    def __init__(self, message: str = "No valid timestamps found. Please check your input format.") -> None:
        super().__init__(message)


def round_half_up(value: float) -> int:
    """Round half up, so 2.5 minutes becomes 3."""
    return int(math.floor(value + 0.5))


def _minutes(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60.0


def derive_alternating(instants: Sequence[datetime], now: Optional[datetime] = None) -> Breakdown:
    """Pair instants as IN, OUT, IN, OUT, ... starting with the day's login.

    Odd positions start a break and even positions end it. A log ending on an
    IN leaves work running until *now*. A log ending on an OUT leaves a break
    running until *now*.
    """
    now = now or datetime.now()
    count = len(instants)
    if count < 2:
        return Breakdown()

    work_periods = [Period.between(WORK, instants[0], instants[1])]
    breaks: list[Period] = []
    for out_index in range(1, count - 1, 2):
        out_time = instants[out_index]
        in_time = instants[out_index + 1]
        breaks.append(Period.between(BREAK, out_time, in_time))
        if out_index + 2 < count:
            work_periods.append(Period.between(WORK, in_time, instants[out_index + 2]))
        else:
            work_periods.append(Period.between(WORK, in_time, now, ongoing=True))

    if count % 2 == 0:
        breaks.append(Period.between(BREAK, instants[-1], now, ongoing=True))

    return _summarize(work_periods, breaks)


def detect_gap_breaks(instants: Sequence[datetime], min_break_minutes: float = 5.0) -> list[Period]:
    """Treat every gap of at least *min_break_minutes* between events as a break."""
    breaks: list[Period] = []
    for current, following in zip(instants, instants[1:]):
        if _minutes(current, following) >= min_break_minutes:
            breaks.append(Period.between(BREAK, current, following))
    return breaks


def active_minutes_from_gaps(
    instants: Sequence[datetime], breaks: Sequence[Period], now: Optional[datetime] = None
) -> float:
    if not instants:
        return 0.0
    now = now or datetime.now()
    end = max(now, instants[-1])
    total = _minutes(instants[0], end)
    return max(0.0, total - sum(period.duration_minutes for period in breaks))


def derive_gaps(
    instants: Sequence[datetime],
    now: Optional[datetime] = None,
    min_break_minutes: float = 5.0,
) -> Breakdown:
    """Count long gaps between events as breaks and everything else as work.

    A lone event counts as work running from that event until *now*.
    """
    now = now or datetime.now()
    if not instants:
        return Breakdown()
    breaks = detect_gap_breaks(instants, min_break_minutes)
    active = active_minutes_from_gaps(instants, breaks, now)
    day = Period.between(WORK, instants[0], max(now, instants[-1]), ongoing=now > instants[-1])
    return Breakdown(
        work_periods=[day],
        breaks=breaks,
        total_break_minutes=round_half_up(sum(period.duration_minutes for period in breaks)),
        active_minutes=round_half_up(active),
    )


def _summarize(work_periods: list[Period], breaks: list[Period]) -> Breakdown:
    return Breakdown(
        work_periods=work_periods,
        breaks=breaks,
        total_break_minutes=round_half_up(sum(period.duration_minutes for period in breaks)),
        active_minutes=round_half_up(sum(period.duration_minutes for period in work_periods)),
    )


def project_from_timestamps(
    breakdown: Breakdown,
    login: datetime,
    required_work_hours: float = 6.0,
    now: Optional[datetime] = None,
) -> ScheduleResult:
    """Project the logout time from the active minutes worked so far."""
    now = now or datetime.now()
    required_minutes = coerce_work_hours(required_work_hours) * 60
    remaining = max(0.0, required_minutes - breakdown.active_minutes)
    try:
        logout = now + timedelta(minutes=remaining)
    except OverflowError:
        logger.debug("Work hours %r put logout past the calendar; using defaults.", required_work_hours)
        required_minutes = DEFAULT_WORK_HOURS * 60
        remaining = max(0.0, required_minutes - breakdown.active_minutes)
        logout = now + timedelta(minutes=remaining)
    return ScheduleResult(
        mode="timestamps",
        login=login,
        now=now,
        projected_logout=logout,
        active_minutes=breakdown.active_minutes,
        total_break_minutes=breakdown.total_break_minutes,
        remaining_minutes=remaining,
        total_office_minutes=max(0.0, _minutes(login, now)),
        progress_percent=_progress(breakdown.active_minutes, required_minutes),
        is_complete=remaining <= 0,
        work_periods=list(breakdown.work_periods),
        breaks=list(breakdown.breaks),
    )


def parse_login_time(value: Optional[str], now: datetime) -> Optional[datetime]:
    """Place an ``HH:MM`` login on the date of *now*; ``None`` if blank or malformed."""
    if not value:
        return None
    match = _LOGIN_PATTERN.match(value)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return now.replace(hour=hour, minute=minute, second=0, microsecond=0)


def calculate_manual(
    login_time: Optional[str],
    work_hours: Any = 6.0,
    break_minutes: Any = 0,
    now: Optional[datetime] = None,
) -> Optional[ScheduleResult]:
    """Estimate logout from a login time plus a fixed break allowance.

    Returns ``None`` when there is no usable login time yet.
    """
    now = now or datetime.now()
    login = parse_login_time(login_time, now)
    if login is None:
        logger.debug("No login time given; skipping manual calculation.")
        return None

    hours = coerce_work_hours(work_hours)
    allowance = coerce_break_minutes(break_minutes)
    work_minutes = hours * 60
    try:
        logout = login + timedelta(minutes=work_minutes + allowance)
    except OverflowError:
        logger.debug(
            "Work hours %r / break %r put logout past the calendar; using defaults.",
            work_hours,
            break_minutes,
        )
        allowance = DEFAULT_BREAK_MINUTES
        work_minutes = DEFAULT_WORK_HOURS * 60
        logout = login + timedelta(minutes=work_minutes + allowance)

    remaining_seconds = (logout - now).total_seconds()
    elapsed = max(0.0, _minutes(login, now))
    active = max(0.0, elapsed - allowance)
    return ScheduleResult(
        mode="manual",
        login=login,
        now=now,
        projected_logout=logout,
        active_minutes=active,
        total_break_minutes=allowance,
        remaining_minutes=max(0, math.floor(remaining_seconds / 60)),
        total_office_minutes=elapsed,
        progress_percent=_progress(active, work_minutes),
        is_complete=remaining_seconds <= 0,
    )


def calculate_from_text(
    text: str,
    work_hours: Any = 6.0,
    now: Optional[datetime] = None,
    pairing: str = ALTERNATING,
    min_gap_minutes: float = 5.0,
) -> ScheduleResult:
    now = now or datetime.now()
    instants = extract_timestamps(text)
    if not instants:
        raise NoTimestampsError()
    if pairing == GAPS:
        breakdown = derive_gaps(instants, now, min_gap_minutes)
    elif pairing == ALTERNATING:
        breakdown = derive_alternating(instants, now)
    else:
        raise ValueError(f"Unknown pairing mode: {pairing!r}")
    logger.debug(
        "Parsed %d timestamps: active=%d break=%d",
        len(instants),
        breakdown.active_minutes,
        breakdown.total_break_minutes,
    )
    return project_from_timestamps(breakdown, instants[0], work_hours, now)


def calculate(
    text: Optional[str] = None,
    login_time: Optional[str] = None,
    settings: Optional[CalculatorSettings] = None,
    now: Optional[datetime] = None,
    pairing: str = ALTERNATING,
) -> Optional[ScheduleResult]:
    """Run whichever mode the inputs call for: the pasted log if any, else manual."""
    settings = settings or CalculatorSettings()
    now = now or datetime.now()
    if text and text.strip():
        return calculate_from_text(
            text,
            settings.required_work_hours,
            now=now,
            pairing=pairing,
            min_gap_minutes=settings.min_gap_minutes,
        )
    return calculate_manual(
        login_time, settings.required_work_hours, settings.break_minutes, now=now
    )


def _progress(active_minutes: float, required_minutes: float) -> float:
    if required_minutes <= 0:
        return 100.0
    return min(100.0, max(0.0, active_minutes / required_minutes * 100))
