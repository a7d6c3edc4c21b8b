"""
Conversion of stored rows (JSON documents or REST responses) into domain models.

Row layout follows the booking database: camelCase columns, times as
``HH:MM`` strings and the calendar day in a separate ``date`` column.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

import pendulum
from pendulum import DateTime

from ..domain.models import BookingStatus, Lesson, OccupiedInterval

BOOKING_SOURCE = "booking"
BLOCKED_SOURCE = "blocked"


def settings_to_map(rows: Any) -> Dict[str, str]:
    """
    Flatten settings rows into a key -> value mapping.

    Accepts either a list of ``{"category", "key", "value"}`` rows or a plain
    mapping. Keys are upper-cased so ``working_start_time`` and
    ``WORKING_START_TIME`` name the same setting; categories are ignored and
    a later row wins over an earlier one.
    """
    if isinstance(rows, Mapping):
        items = rows.items()
    else:
        items = (
            (row.get("key"), row.get("value"))
            for row in rows or []
            if isinstance(row, Mapping)
        )

    settings: Dict[str, str] = {}
    for key, value in items:
        if key is None or value is None:
            continue
        settings[str(key).upper()] = str(value)
    return settings


def parse_lesson(row: Mapping[str, Any]) -> Lesson:
    """
    Build a Lesson from a stored row.

    Raises:
        KeyError: If id or duration is missing
        TypeError: If the row is not a mapping
        ValueError: If duration is not an integer
    """
    if not isinstance(row, Mapping):
        raise TypeError(f"Expected an object, got {type(row).__name__}")
    price = row.get("price")
    return Lesson(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        duration_minutes=int(row["duration"]),
        is_active=bool(row.get("isActive", True)),
        price=float(price) if price is not None else None,
    )


def parse_day(value: Any, timezone: str) -> DateTime:
    """
    Parse the ``date`` column of a booking or block.

    Raises:
        ValueError: If the value is not a date or datetime
    """
    parsed = pendulum.parse(str(value), tz=timezone)
    if not isinstance(parsed, DateTime):
        raise ValueError(f"Could not parse date: {value}")
    return parsed.in_timezone(timezone)


def is_on_day(value: Any, day: DateTime, timezone: str) -> bool:
    """Check whether a stored date falls on ``day`` (inclusive day bounds)."""
    moment = parse_day(value, timezone)
    return day.start_of("day") <= moment <= day.end_of("day")


def parse_status(row: Mapping[str, Any]) -> Optional[BookingStatus]:
    """Return the booking status, or None for an unknown status string."""
    try:
        return BookingStatus(str(row.get("status", "")).upper())
    except ValueError:
        return None


def parse_interval(row: Mapping[str, Any], source: str) -> OccupiedInterval:
    """
    Build an occupied interval from ``startTime``/``endTime`` columns.

    Raises:
        KeyError: If a time column is missing
        TypeError: If the row is not a mapping
        ValueError: If a time column is not ``HH:MM``
    """
    if not isinstance(row, Mapping):
        raise TypeError(f"Expected an object, got {type(row).__name__}")
    return OccupiedInterval.from_strings(row["startTime"], row["endTime"], source=source)


def occupying_bookings(rows: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Keep only bookings whose status blocks the calendar."""
    occupying = BookingStatus.occupying()
    return [row for row in rows if parse_status(row) in occupying]
