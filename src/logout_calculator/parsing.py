"""Extract clock-in/clock-out instants from pasted attendance logs.

The expected input looks like an export from a badge or login portal::

    11:01:55 am
    03 Feb 2026
    KGIT database new
    Info
    12:49:32 pm
    03 Feb 2026

Each time line is normally followed by a date line. Free-form labels between
the pairs are ignored.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Optional

from .models import DateToken, TimeToken

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2}):(\d{2})(?:\s*(am|pm))?", re.IGNORECASE)
_DATE_PATTERN = re.compile(r"(\d{1,2})\s+([A-Za-z]+)\s+(\d{4})")

_MONTHS: dict[str, int] = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}


def resolve_month(name: str) -> Optional[int]:
    """Return the month number for a full or three-letter English month name."""
    return _MONTHS.get(name.strip().lower())


def parse_time_token(line: str) -> Optional[TimeToken]:
    """Find an ``H:MM:SS [am|pm]`` time in *line* and normalize it to 24-hour form."""
    match = _TIME_PATTERN.search(line)
    if not match:
        return None
    hour, minute, second = (int(match.group(i)) for i in (1, 2, 3))
    meridiem = match.group(4).lower() if match.group(4) else None
    if meridiem == "pm" and hour < 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    # A meridiem on an hour above 12 ("13:45:00 pm") is taken as 24-hour already.
    return TimeToken(hour=hour, minute=minute, second=second, meridiem=meridiem)


def parse_date_token(line: str) -> Optional[DateToken]:
    """Find a ``D Month YYYY`` date in *line*; unknown month names yield ``None``."""
    match = _DATE_PATTERN.search(line)
    if not match:
        return None
    month = resolve_month(match.group(2))
    if month is None:
        return None
    return DateToken(day=int(match.group(1)), month=month, year=int(match.group(3)))


def combine(date: DateToken, time: TimeToken) -> datetime:
    """Build an instant, rolling out-of-range days or minutes into the next unit."""
    base = datetime(date.year, date.month, 1)
    return base + timedelta(
        days=date.day - 1, hours=time.hour, minutes=time.minute, seconds=time.second
    )


def with_time_of_day(context: datetime, time: TimeToken) -> datetime:
    midnight = context.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(hours=time.hour, minutes=time.minute, seconds=time.second)


def extract_timestamps(text: str) -> list[datetime]:
    """Return every dated timestamp found in *text*, sorted ascending.

    A time line is dated by the line right after it. A time on the final line
    borrows the date of the most recent dated timestamp. Any other undated time
    is dropped.
    """
    if not text or not text.strip():
        return []

    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]

    timestamps: list[datetime] = []
    context: Optional[datetime] = None
    for index, line in enumerate(lines):
        time = parse_time_token(line)
        if time is None:
            continue
        next_line = lines[index + 1] if index + 1 < len(lines) else None
        instant, context = _resolve_instant(time, next_line, context)
        if instant is None:
            logger.debug("Dropping undated time on line %d: %r", index + 1, line)
            continue
        timestamps.append(instant)

    return sorted(timestamps)


def _resolve_instant(
    time: TimeToken, next_line: Optional[str], context: Optional[datetime]
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Date a parsed time, returning the instant and the updated date context.

    Dates outside the representable calendar (year 0, year 10000 after
    rollover) drop the pair and leave the context untouched.
    """
    try:
        if next_line is not None:
            date = parse_date_token(next_line)
            if date is None:
                return None, context
            instant = combine(date, time)
            return instant, instant
        if context is not None:
            return with_time_of_day(context, time), context
    except (ValueError, OverflowError):
        return None, context
    return None, context
