"""
Duration calculator — worked hours from a time-of-day pair.

Pure functions, no I/O.  ``hours_between`` never raises: reversed,
equal, empty or malformed times all yield 0, so it is safe to call on
anything read back from storage.
"""

from __future__ import annotations

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal

# Any fixed day works; only the difference matters.
_REFERENCE_DATE = dt.date(2000, 1, 1)

_TWO_PLACES = Decimal("0.01")


def parse_time_of_day(value: str | None) -> dt.time | None:
    """Parse ``HH:MM`` into a time. Return None if empty or invalid."""
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) != 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
        return dt.time(hour, minute)
    except ValueError:
        return None


def is_valid_range(entrance: str | None, exit: str | None) -> bool:
    """Whether both times parse and exit is strictly after entrance."""
    start = parse_time_of_day(entrance)
    end = parse_time_of_day(exit)
    return start is not None and end is not None and end > start


def hours_between(entrance: str | None, exit: str | None) -> float:
    """Elapsed hours from ``entrance`` to ``exit``, rounded half-up to 2 places.

    Args:
        entrance: Start time as ``HH:MM``.
        exit: End time as ``HH:MM``.

    Returns:
        Hours as a float, or 0 when exit is not after entrance or
        either value is missing or malformed.
    """
    start = parse_time_of_day(entrance)
    end = parse_time_of_day(exit)
    if start is None or end is None or end <= start:
        return 0.0

    delta = dt.datetime.combine(_REFERENCE_DATE, end) - dt.datetime.combine(_REFERENCE_DATE, start)
    hours = Decimal(int(delta.total_seconds())) / Decimal(3600)
    return float(hours.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def format_hours(hours: float) -> str:
    """Fixed two-decimal rendering used in every export."""
    return str(Decimal(str(hours)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
