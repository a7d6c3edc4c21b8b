"""
Application services for answering "which lesson times are still free?".

The service resolves the lesson, the working hours and the occupied
intervals through a data source adapter and delegates the actual slot
computation to the domain-level ``SlotCalculator``. Keeping the data
access behind a small protocol lets the JSON store, the Supabase client
or a test stub be plugged in interchangeably.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

import pendulum
from pendulum import DateTime

from ..config import ScheduleDefaults
from ..domain.exceptions import (
    InvalidConfiguration,
    InvalidRequestError,
    LessonNotFoundError,
)
from ..domain.models import (
    BreakWindow,
    Lesson,
    OccupiedInterval,
    Slot,
    TimeOfDay,
    WorkingWindow,
)
from ..domain.slot_calculator import SlotCalculator

logger = logging.getLogger(__name__)

WORKING_START_KEY = "WORKING_START_TIME"
WORKING_END_KEY = "WORKING_END_TIME"
BREAK_START_KEY = "BREAK_START_TIME"
BREAK_END_KEY = "BREAK_END_TIME"
MIN_ADVANCE_HOURS_KEY = "MIN_ADVANCE_BOOKING_HOURS"
MAX_ADVANCE_DAYS_KEY = "MAX_ADVANCE_BOOKING_DAYS"

DATE_FORMAT = "YYYY-MM-DD"


class DataSourceProtocol(Protocol):
    """Protocol describing the data access needed by the service."""

    def get_settings(self) -> Dict[str, str]:
        """Return admin settings keyed by upper-case setting name."""

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        """Return the lesson with this id, or None."""

    def list_lessons(self) -> List[Lesson]:
        """Return the bookable lessons."""

    def get_occupied_bookings(self, day: DateTime) -> List[OccupiedInterval]:
        """Return pending and confirmed bookings on ``day``."""

    def get_blocked_slots(self, day: DateTime) -> List[OccupiedInterval]:
        """Return admin-blocked intervals on ``day``."""


@dataclass(frozen=True)
class BookingHorizon:
    """
    How far ahead lessons can be booked.

    ``min_advance_hours`` drops slots starting sooner than that from now;
    ``max_advance_days`` hides days further ahead than that from today.
    """
    min_advance_hours: int = 0
    max_advance_days: Optional[int] = None

    def allows_day(self, day: DateTime, now: DateTime) -> bool:
        """Check whether ``day`` is within the advance-booking window."""
        if self.max_advance_days is None:
            return True
        last_day = now.start_of("day").add(days=self.max_advance_days)
        return day.start_of("day") <= last_day

    def filter_slots(self, slots: Iterable[Slot], day: DateTime, now: DateTime) -> List[Slot]:
        """Drop slots that are outside the booking horizon."""
        if not self.allows_day(day, now):
            return []

        earliest = now.add(hours=self.min_advance_hours)
        return [
            slot for slot in slots
            if day.set(hour=slot.start.hour, minute=slot.start.minute, second=0, microsecond=0) >= earliest
        ]


class SlotAvailabilityService:
    """
    Orchestrates settings resolution, data retrieval and slot calculation.
    """

    def __init__(
        self,
        data_source: DataSourceProtocol,
        slot_calculator: SlotCalculator | None = None,
        schedule_defaults: ScheduleDefaults | None = None,
        timezone: str = "Europe/Stockholm",
        horizon: BookingHorizon | None = None,
    ) -> None:
        """
        Args:
            data_source: Adapter providing settings, lessons and occupied intervals
            slot_calculator: Calculator to use, defaults to the 15-minute grid
            schedule_defaults: Working hours used when a setting is missing
            timezone: IANA timezone in which dates are interpreted
            horizon: Advance-booking limits; None disables them entirely
        """
        self._data_source = data_source
        self._slot_calculator = slot_calculator or SlotCalculator()
        self._defaults = schedule_defaults or ScheduleDefaults()
        self._timezone = timezone
        self._horizon = horizon

    @property
    def timezone(self) -> str:
        return self._timezone

    def parse_date(self, value: str | None) -> DateTime:
        """
        Parse a ``YYYY-MM-DD`` date into the start of that day.

        Raises:
            InvalidRequestError: If the date is missing or malformed
        """
        if not value:
            raise InvalidRequestError("Date is required")
        if not isinstance(value, str):
            raise InvalidRequestError(f"Invalid date {value!r}, expected YYYY-MM-DD")

        try:
            return pendulum.from_format(value.strip(), DATE_FORMAT, tz=self._timezone).start_of("day")
        except ValueError as exc:
            raise InvalidRequestError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc

    def get_lesson(self, lesson_id: str | None) -> Lesson:
        """
        Resolve a bookable lesson.

        Raises:
            InvalidRequestError: If no lesson id is given
            LessonNotFoundError: If the lesson does not exist or is inactive
        """
        if not lesson_id:
            raise InvalidRequestError("Lesson id is required")

        lesson = self._data_source.get_lesson(lesson_id)
        if lesson is None or not lesson.is_active:
            raise LessonNotFoundError(f"Lesson not found: {lesson_id}")
        return lesson

    def resolve_schedule(
        self,
        settings: Mapping[str, str],
    ) -> Tuple[WorkingWindow, Optional[BreakWindow]]:
        """
        Build working window and break from settings, falling back to defaults.

        Raises:
            InvalidConfiguration: If a configured time is not ``HH:MM``
        """
        working_window = WorkingWindow.from_strings(
            self._setting(settings, WORKING_START_KEY, self._defaults.working_start),
            self._setting(settings, WORKING_END_KEY, self._defaults.working_end),
        )

        break_start = self._setting(settings, BREAK_START_KEY, self._defaults.break_start)
        break_end = self._setting(settings, BREAK_END_KEY, self._defaults.break_end)

        if break_start is None or break_end is None:
            if break_start is not None or break_end is not None:
                logger.warning(
                    "Ignoring break with only one end configured (start=%s, end=%s)",
                    break_start,
                    break_end,
                )
            return working_window, None

        break_window = BreakWindow.from_strings(break_start, break_end)

        if not working_window.contains(break_window):
            logger.warning(
                "Break %s lies outside working hours %s", break_window, working_window
            )

        return working_window, break_window

    def current_schedule(self) -> Tuple[WorkingWindow, Optional[BreakWindow]]:
        """Resolve working window and break from the data source's settings."""
        return self.resolve_schedule(self._data_source.get_settings())

    def list_lessons(self) -> List[Lesson]:
        """Active lessons, sorted by name."""
        lessons = [lesson for lesson in self._data_source.list_lessons() if lesson.is_active]
        return sorted(lessons, key=lambda lesson: lesson.name)

    def resolve_horizon(self, settings: Mapping[str, str]) -> Optional[BookingHorizon]:
        """Apply settings overrides to the configured booking horizon."""
        if self._horizon is None:
            return None

        return BookingHorizon(
            min_advance_hours=self._int_setting(
                settings, MIN_ADVANCE_HOURS_KEY, self._horizon.min_advance_hours
            ),
            max_advance_days=self._int_setting(
                settings, MAX_ADVANCE_DAYS_KEY, self._horizon.max_advance_days
            ),
        )

    def fetch_occupied(self, day: DateTime) -> List[OccupiedInterval]:
        """Collect bookings and blocked intervals for ``day``."""
        bookings = self._data_source.get_occupied_bookings(day)
        blocked = self._data_source.get_blocked_slots(day)

        logger.debug(
            "Occupied on %s: %d booking(s), %d blocked interval(s)",
            day.to_date_string(),
            len(bookings),
            len(blocked),
        )

        return [*bookings, *blocked]

    def calculate_slots(
        self,
        *,
        working_window: WorkingWindow,
        break_window: Optional[BreakWindow],
        lesson_duration: int,
        occupied: List[OccupiedInterval],
    ) -> List[Slot]:
        """Calculate available slots from resolved inputs."""
        return self._slot_calculator.find_available_slots(
            working_window=working_window,
            break_window=break_window,
            lesson_duration=lesson_duration,
            occupied=occupied,
        )

    def find_slots(
        self,
        date: str | None,
        lesson_id: str | None,
        now: DateTime | None = None,
    ) -> List[Slot]:
        """
        Compute the bookable slots of a lesson on one day.

        Args:
            date: Day to look at, ``YYYY-MM-DD``
            lesson_id: Lesson whose duration determines the slot length
            now: Reference time for the booking horizon, defaults to the current time

        Returns:
            Slots in ascending start order

        Raises:
            InvalidRequestError: If date or lesson id is missing or malformed
            LessonNotFoundError: If the lesson cannot be booked
            InvalidConfiguration: If the working hours or lesson duration are unusable
            DataSourceError: If the data source cannot be read
        """
        day = self.parse_date(date)
        lesson = self.get_lesson(lesson_id)

        settings = self._data_source.get_settings()
        working_window, break_window = self.resolve_schedule(settings)

        slots = self.calculate_slots(
            working_window=working_window,
            break_window=break_window,
            lesson_duration=lesson.duration_minutes,
            occupied=self.fetch_occupied(day),
        )

        horizon = self.resolve_horizon(settings)
        if horizon is not None:
            slots = horizon.filter_slots(slots, day, now or pendulum.now(self._timezone))

        logger.info(
            "Available slots calculated: date=%s lesson=%s slots=%d",
            day.to_date_string(),
            lesson.id,
            len(slots),
        )

        return slots

    def is_slot_available(
        self,
        date: str | None,
        lesson_id: str | None,
        start_time: str | None,
        now: DateTime | None = None,
    ) -> bool:
        """
        Check whether a lesson can still start at ``start_time`` on ``date``.

        The answer reflects the bookings known right now; it does not
        reserve anything.

        Raises:
            InvalidRequestError: If the start time is missing or malformed
        """
        if not start_time:
            raise InvalidRequestError("Start time is required")

        try:
            requested = TimeOfDay.parse(start_time)
        except InvalidConfiguration as exc:
            raise InvalidRequestError(str(exc)) from exc

        return any(
            slot.start == requested
            for slot in self.find_slots(date, lesson_id, now=now)
        )

    @staticmethod
    def _setting(settings: Mapping[str, str], key: str, default: Optional[str]) -> Optional[str]:
        value = settings.get(key)
        if value is None or not str(value).strip():
            return default
        return str(value).strip()

    @staticmethod
    def _int_setting(settings: Mapping[str, str], key: str, default: Optional[int]) -> Optional[int]:
        value = settings.get(key)
        if value is None or not str(value).strip():
            return default
        try:
            parsed = int(str(value).strip())
        except ValueError:
            logger.warning("Ignoring non-numeric setting %s=%r", key, value)
            return default
        if parsed < 0:
            logger.warning("Ignoring negative setting %s=%r", key, value)
            return default
        return parsed
