"""
Date helpers for the booking backend.

The backend takes dates as ``dd/MM/yyyy`` and returns datetimes in at least
two shapes (``14/01/2026 10:00:00`` and ``19-Jan-2026 12:30``), so parsing is
separator-agnostic and accepts numeric or abbreviated months.
"""

from __future__ import annotations

from datetime import date, datetime, time

MONTH_ABBREVIATIONS = [
    "jan",
    "feb",
    "mar",
    "apr",
    "may",
    "jun",
    "jul",
    "aug",
    "sep",
    "oct",
    "nov",
    "dec",
]

BACKEND_DATE_FORMAT = "%d/%m/%Y"


def _parse_month(value: str) -> int:
    if value.isdigit():
        return int(value)

    try:
        return MONTH_ABBREVIATIONS.index(value[:3].lower()) + 1
    except ValueError:
        raise ValueError(f"Unknown month: {value!r}") from None


def parse_date(value: str) -> datetime:
    """
    Parse a backend date or datetime string.

    Accepts ``/`` or ``-`` as the date separator, day-month-year order (or
    year-month-day when the first part has four digits), numeric or
    three-letter months, 2- or 4-digit years, and an optional
    ``HH[:mm[:ss]]`` time.

    Args:
        value: Date string as returned by the backend

    Returns:
        Naive datetime

    Raises:
        ValueError: If the string is empty or not a recognisable date
    """
    text = (value or "").strip()
    if not text:
        raise ValueError("Empty date string")

    date_part, _, time_part = text.partition(" ")
    separator = "/" if "/" in date_part else "-"
    parts = date_part.split(separator)
    if len(parts) < 3:
        raise ValueError(f"Unrecognised date: {value!r}")

    if len(parts[0]) == 4:
        year_str, month_str, day_str = parts[:3]
    else:
        day_str, month_str, year_str = parts[:3]

    year = int(year_str)
    if year < 100:
        year += 2000

    time_part = time_part.strip()
    time_fields = [int(f) for f in time_part.split(":") if f] if time_part else []
    hour, minute, second = (time_fields + [0, 0, 0])[:3]

    return datetime(year, _parse_month(month_str), int(day_str), hour, minute, second)


def format_backend_date(value: date | str) -> str:
    """Format a date as the ``dd/MM/yyyy`` string the availability endpoint expects."""
    if isinstance(value, str):
        value = parse_date(value)
    return value.strftime(BACKEND_DATE_FORMAT)


def is_blocked_today(
    pickup: str, dropoff: str, today: date | None = None
) -> bool:
    """
    Check whether today overlaps the inclusive [pickup, dropoff] range.

    Args:
        pickup: Pickup datetime string
        dropoff: Dropoff datetime string
        today: Day to check, defaults to the current local date

    Returns:
        True if the block covers any part of the day
    """
    today = today or date.today()
    day_start = datetime.combine(today, time.min)
    day_end = datetime.combine(today, time(23, 59, 59))

    return parse_date(pickup) <= day_end and parse_date(dropoff) >= day_start
