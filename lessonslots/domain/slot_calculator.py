"""
Core business logic for calculating bookable lesson slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from typing import Iterable, List, Optional

from .exceptions import InvalidConfiguration
from .models import BreakWindow, OccupiedInterval, Slot, TimeOfDay, TimeRange, WorkingWindow

SLOT_STEP_MINUTES = 15


class SlotCalculator:
    """
    Calculates bookable slots for one day on a fixed start-time grid.

    Algorithm:
    1. Place a candidate of the lesson's length at every grid point from
       opening time, stepping ``step_minutes`` each time
    2. Stop once a candidate would end after closing time
    3. Drop candidates overlapping the break
    4. Drop candidates overlapping any booking or blocked interval
    5. Return the survivors in start order

    Starting every slot on the grid keeps booking times human friendly
    (:00, :15, :30, :45 from opening) at the cost of leaving an unaligned
    gap unused even when a lesson would fit into it.
    """

    def __init__(self, step_minutes: int = SLOT_STEP_MINUTES):
        if step_minutes <= 0:
            raise InvalidConfiguration(
                f"Slot step must be a positive number of minutes, got {step_minutes}"
            )
        self.step_minutes = step_minutes

    def find_available_slots(
        self,
        working_window: WorkingWindow,
        break_window: Optional[BreakWindow],
        lesson_duration: int,
        occupied: Iterable[OccupiedInterval] = (),
    ) -> List[Slot]:
        """
        Find all bookable slots for a single day.

        Args:
            working_window: Opening and closing time of the day
            break_window: Daily break, or None when there is no break
            lesson_duration: Lesson length in minutes
            occupied: Bookings and blocked intervals already on this day,
                in any order and possibly overlapping each other

        Returns:
            Slots of exactly ``lesson_duration`` minutes, ascending by start

        Raises:
            InvalidConfiguration: If the working window is empty or inverted,
                or the lesson duration is not positive
        """
        self._validate(working_window, lesson_duration)

        occupied_ranges = list(occupied)
        slots: List[Slot] = []

        cursor = working_window.start.minutes
        closing = working_window.end.minutes

        while cursor + lesson_duration <= closing:
            candidate = Slot(start=TimeOfDay(cursor), end=TimeOfDay(cursor + lesson_duration))

            if not self._is_blocked(candidate, break_window, occupied_ranges):
                slots.append(candidate)

            cursor += self.step_minutes

        return slots

    @staticmethod
    def _validate(working_window: WorkingWindow, lesson_duration: int) -> None:
        if working_window.start >= working_window.end:
            raise InvalidConfiguration(
                f"Working hours must open before they close, got {working_window}"
            )
        if lesson_duration <= 0:
            raise InvalidConfiguration(
                f"Lesson duration must be a positive number of minutes, got {lesson_duration}"
            )

    @staticmethod
    def _is_blocked(
        candidate: Slot,
        break_window: Optional[BreakWindow],
        occupied: List[TimeRange],
    ) -> bool:
        """Check the candidate against the break and every occupied interval."""
        if break_window is not None and candidate.overlaps(break_window):
            return True

        return any(candidate.overlaps(interval) for interval in occupied)


def compute_available_slots(
    working_window: WorkingWindow,
    break_window: Optional[BreakWindow],
    lesson_duration: int,
    occupied: Iterable[OccupiedInterval] = (),
) -> List[Slot]:
    """Compute bookable slots on the default 15-minute grid."""
    return SlotCalculator().find_available_slots(
        working_window=working_window,
        break_window=break_window,
        lesson_duration=lesson_duration,
        occupied=occupied,
    )
