"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    DataSourceError,
    InvalidConfiguration,
    InvalidRequestError,
    LessonNotFoundError,
    LessonSlotsError,
)
from .models import (
    BookingStatus,
    BreakWindow,
    Lesson,
    OccupiedInterval,
    Slot,
    TimeOfDay,
    TimeRange,
    WorkingWindow,
)
from .slot_calculator import SLOT_STEP_MINUTES, SlotCalculator, compute_available_slots

__all__ = [
    "BookingStatus",
    "BreakWindow",
    "DataSourceError",
    "InvalidConfiguration",
    "InvalidRequestError",
    "Lesson",
    "LessonNotFoundError",
    "LessonSlotsError",
    "OccupiedInterval",
    "SLOT_STEP_MINUTES",
    "Slot",
    "SlotCalculator",
    "TimeOfDay",
    "TimeRange",
    "WorkingWindow",
    "compute_available_slots",
]
