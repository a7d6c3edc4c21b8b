"""
Domain models for wall-clock times, intervals and bookable slots.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from .exceptions import InvalidConfiguration

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """
    A wall-clock time within one day, stored as minutes since midnight.

    Invariant: 0 <= minutes < 1440.
    """
    minutes: int

    def __post_init__(self):
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise InvalidConfiguration(
                f"Time of day must be between 00:00 and 23:59, got {self.minutes} minutes"
            )

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        """
        Parse a 24-hour ``HH:MM`` string (``HH:MM:SS`` is accepted, seconds are dropped).

        Raises:
            InvalidConfiguration: If the string is not a valid wall-clock time
        """
        match = _TIME_PATTERN.match(str(value).strip())
        if not match:
            raise InvalidConfiguration(f"Invalid time '{value}', expected HH:MM")

        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise InvalidConfiguration(f"Invalid time '{value}', expected HH:MM")

        return cls(hours * 60 + minutes)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def add(self, minutes: int) -> "TimeOfDay":
        """Return the time ``minutes`` later on the same day."""
        return TimeOfDay(self.minutes + minutes)

    def format(self) -> str:
        """Format as zero-padded ``HH:MM``."""
        return f"{self.hour:02d}:{self.minute:02d}"

    def __str__(self) -> str:
        return self.format()


@dataclass(frozen=True)
class TimeRange:
    """
    Half-open time range ``[start, end)`` within one day.

    Ordering of start and end is not enforced here; callers that need
    ``start < end`` validate it themselves.
    """
    start: TimeOfDay
    end: TimeOfDay

    @classmethod
    def from_strings(cls, start: str, end: str, **kwargs):
        """Build a range from two ``HH:MM`` strings."""
        return cls(start=TimeOfDay.parse(start), end=TimeOfDay.parse(end), **kwargs)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end.minutes - self.start.minutes

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another; touching endpoints do not overlap."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeRange") -> bool:
        """Check if ``other`` lies entirely within this range."""
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


@dataclass(frozen=True)
class WorkingWindow(TimeRange):
    """The daily span during which lessons may be scheduled."""


@dataclass(frozen=True)
class BreakWindow(TimeRange):
    """A sub-interval of the working day reserved as unavailable (e.g. lunch)."""


@dataclass(frozen=True)
class OccupiedInterval(TimeRange):
    """
    Time that must be excluded from availability.

    ``source`` records whether the interval came from a booking or an
    admin block; it is informational only.
    """
    source: str = field(default="", compare=False)


@dataclass(frozen=True)
class Slot(TimeRange):
    """
    Represents a bookable lesson slot.
    """

    def to_dict(self) -> Dict[str, str]:
        """Serialize to the ``{"startTime", "endTime"}`` shape of the JSON API."""
        return {"startTime": self.start.format(), "endTime": self.end.format()}


@dataclass(frozen=True)
class Lesson:
    """A lesson type offered by the school."""
    id: str
    name: str
    duration_minutes: int
    is_active: bool = True
    price: Optional[float] = None


class BookingStatus(str, Enum):
    """Lifecycle status of a stored booking."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @classmethod
    def occupying(cls) -> FrozenSet["BookingStatus"]:
        """Statuses whose bookings block the calendar."""
        return frozenset({cls.PENDING, cls.CONFIRMED})
