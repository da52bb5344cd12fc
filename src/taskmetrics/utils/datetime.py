"""Datetime utilities with consistent UTC timezone handling.

This module provides centralized datetime functions to ensure all datetime
operations in Task Metrics are timezone-aware and use UTC consistently, plus
the calendar arithmetic shared by the trend and cycle-time analyzers.
"""

import math
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

SECONDS_PER_DAY = 24 * 60 * 60


def now_utc() -> datetime:
    """Return current datetime in UTC timezone.

    Returns:
        Current datetime with timezone=UTC
    """
    return datetime.now(timezone.utc)


def min_utc() -> datetime:
    """Return datetime.min with UTC timezone.

    Returns:
        datetime.min with timezone=UTC
    """
    return datetime.min.replace(tzinfo=timezone.utc)


def max_utc() -> datetime:
    """Return datetime.max with UTC timezone.

    Returns:
        datetime.max with timezone=UTC
    """
    return datetime.max.replace(tzinfo=timezone.utc)


def add_days(dt: datetime, days: float) -> datetime:
    """Shift dt by a fractional number of days, clamped to the representable range."""
    try:
        return dt + timedelta(days=days)
    except OverflowError:
        return max_utc() if days > 0 else min_utc()


def ensure_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure datetime is timezone-aware, assuming UTC if naive.

    Args:
        dt: Datetime to check/convert, or None

    Returns:
        Timezone-aware datetime in UTC, or None if input was None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or date/datetime) into an aware UTC datetime.

    A bare ``YYYY-MM-DD`` becomes midnight UTC of that date. A trailing ``Z``
    is accepted. Returns None for None/empty input.

    Raises:
        ValueError: If the value is a string that is not a valid timestamp,
            or of an unsupported type.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return ensure_aware(datetime.fromisoformat(text))
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def to_iso_string(dt: Optional[datetime]) -> Optional[str]:
    """Convert datetime to ISO string with timezone info.

    Args:
        dt: Datetime to convert, or None

    Returns:
        ISO format string with timezone, or None if input was None
    """
    if dt is None:
        return None

    aware_dt = ensure_aware(dt)
    return aware_dt.isoformat()


def days_between(start: datetime, end: datetime) -> float:
    """Elapsed days from start to end as a float (negative if end < start)."""
    return (end - start).total_seconds() / SECONDS_PER_DAY


def day_start(dt: datetime) -> datetime:
    """Midnight of the same calendar day."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def month_start(dt: datetime) -> datetime:
    """Midnight on the first day of the same calendar month."""
    return day_start(dt).replace(day=1)


def add_months(dt: datetime, months: int) -> datetime:
    """Shift a month-start datetime by a (possibly negative) number of months.

    Only meaningful for datetimes on day 1; callers pass ``month_start`` values.
    """
    index = dt.year * 12 + (dt.month - 1) + months
    year, month = divmod(index, 12)
    return dt.replace(year=year, month=month + 1, day=1)


def quarter_start(dt: datetime) -> datetime:
    """Midnight on the first day of the calendar quarter containing dt."""
    first_month = ((dt.month - 1) // 3) * 3 + 1
    return month_start(dt).replace(month=first_month)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 rounding towards +infinity."""
    return int(math.floor(value + 0.5))


def round_decimal(value: float, places: int = 1) -> float:
    """Round to a fixed number of decimal places, halves away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def month_abbreviation(dt: datetime) -> str:
    """English three-letter month name, independent of the process locale."""
    return MONTH_ABBREVIATIONS[dt.month - 1]
