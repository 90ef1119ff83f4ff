"""Minute-of-day arithmetic and calendar helpers.

Everything in the scheduling core that touches a clock time or a calendar
date goes through this module, so the conventions live in one place:

- Clock times are ``"HH:MM"`` strings; ``"24:00"`` is a valid end time.
- Minutes of day are integers in ``[0, 1440]``.
- Week weekday indexes are 0=Monday..6=Sunday.
- Business-hour weekdays are 0=Sunday..6=Saturday.
"""

import re
from datetime import date, timedelta

MINUTES_PER_DAY = 1440

# Database TIME columns may come back as HH:MM:SS; seconds are dropped
_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_hhmm(value: str) -> int:
    """Convert an ``HH:MM`` string into minutes from midnight.

    Raises:
        ValueError: If the string is not a valid time of day.
    """
    match = _HHMM_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3) or 0)
    if minutes >= 60 or seconds >= 60 or hours > 24 or (hours == 24 and (minutes or seconds)):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    """Convert minutes from midnight into a zero-padded ``HH:MM`` string."""
    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise ValueError(f"Minute of day out of range: {minutes}")
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def normalize_close_min(close_min: int) -> int:
    """A close of 0 means the store closes at midnight."""
    return MINUTES_PER_DAY if close_min == 0 else close_min


def date_range(start: date, end: date) -> list[date]:
    """All dates from start to end, inclusive and ascending."""
    if end < start:
        raise ValueError(f"Date range end {end} is before start {start}")
    dates = []
    current = start
    while current <= end:
        dates.append(current)
        current += timedelta(days=1)
    return dates


def week_start(d: date, week_starts_on: int = 0) -> date:
    """First day of the week containing ``d``.

    Args:
        d: Any date in the week.
        week_starts_on: Weekday index the week starts on (0=Monday).
    """
    return d - timedelta(days=(d.weekday() - week_starts_on) % 7)


def week_bounds(d: date, week_starts_on: int = 0) -> tuple[date, date]:
    """(first, last) date of the seven-day week containing ``d``."""
    start = week_start(d, week_starts_on)
    return start, start + timedelta(days=6)


def weekday_index(d: date, week_starts_on: int = 0) -> int:
    """Position of ``d`` inside its week (0..6)."""
    return (d.weekday() - week_starts_on) % 7


def business_weekday(d: date) -> int:
    """Weekday in the business-hours convention (0=Sunday..6=Saturday)."""
    return (d.weekday() + 1) % 7


def day_offset(start: date, end: date) -> int:
    """Signed number of days from start to end."""
    return (end - start).days


def slot_key(member_id: str, d: date) -> str:
    """Key used by exclusion sets: ``"member:YYYY-MM-DD"``."""
    return f"{member_id}:{d.isoformat()}"
