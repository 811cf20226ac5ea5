"""
Time helpers.

Instants are kept as naive UTC datetimes in the database. Conversion to the
attendance time zone happens only when a local calendar day or wall-clock
time is needed.
"""

from datetime import date, datetime, timezone
from typing import Optional

import pytz


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(instant: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware instant to naive UTC. Naive values are taken as UTC."""
    if instant is None or instant.tzinfo is None:
        return instant
    return instant.astimezone(timezone.utc).replace(tzinfo=None)


def get_timezone(name: str):
    """Return the pytz zone for ``name``. Raises ``pytz.UnknownTimeZoneError``."""
    return pytz.timezone(name)


def to_local(instant: datetime, tz) -> datetime:
    """Convert a naive UTC (or aware) instant to an aware datetime in ``tz``."""
    if instant.tzinfo is None:
        instant = pytz.utc.localize(instant)
    return instant.astimezone(tz)


def local_date(instant: datetime, tz) -> date:
    return to_local(instant, tz).date()


def format_minutes(total_minutes: int) -> str:
    """Format minutes after midnight as HH:MM."""
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def average_clock_time(instants: list[datetime], tz) -> str:
    """
    Average local wall-clock time of ``instants`` as HH:MM.

    Returns ``--:--`` for an empty list.
    """
    if not instants:
        return "--:--"
    minutes = []
    for instant in instants:
        local = to_local(instant, tz)
        minutes.append(local.hour * 60 + local.minute)
    # Half-up rounding on a non-negative mean
    avg = int(sum(minutes) / len(minutes) + 0.5)
    return format_minutes(avg)


def shift_months(day: date, months: int) -> date:
    """Move ``day`` by ``months`` calendar months, clamping the day of month."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    for candidate in (day.day, 30, 29, 28):
        try:
            return date(year, month, min(day.day, candidate))
        except ValueError:
            continue
    raise ValueError(f"Cannot shift {day} by {months} months")
