"""
File-backed data source for settings, lessons, bookings and blocked slots.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pendulum import DateTime

from ..domain.exceptions import DataSourceError
from ..domain.models import Lesson, OccupiedInterval
from . import records

logger = logging.getLogger(__name__)


class JsonDataStore:
    """
    Data source reading a single JSON document.

    Expected layout::

        {
            "settings": [{"category": "general", "key": "working_start_time", "value": "08:00"}],
            "lessons": [{"id": "l1", "name": "...", "duration": 60, "isActive": true}],
            "bookings": [{"date": "2025-03-10", "startTime": "09:00", "endTime": "10:00",
                          "status": "CONFIRMED"}],
            "blockedSlots": [{"date": "2025-03-10", "startTime": "14:00", "endTime": "15:00"}]
        }

    Handy for demos and tests without a hosted database.
    """

    def __init__(self, path: Path, timezone: str = "Europe/Stockholm"):
        """
        Initialize the store.

        Args:
            path: Path to the JSON document
            timezone: IANA timezone used to decide which calendar day a record belongs to
        """
        self.path = Path(path)
        self.timezone = timezone
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        """Load and cache the JSON document."""
        if self._data is not None:
            return self._data

        if not self.path.exists():
            raise DataSourceError(f"Data file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise DataSourceError(f"Could not read data file {self.path}: {exc}") from exc

        if not isinstance(data, dict):
            raise DataSourceError(f"Data file {self.path} must contain a JSON object.")

        self._data = data
        return data

    def get_settings(self) -> Dict[str, str]:
        """Return the settings as an upper-cased key -> value mapping."""
        return records.settings_to_map(self._load().get("settings", []))

    def list_lessons(self) -> List[Lesson]:
        """Return all lessons, skipping rows that cannot be parsed."""
        lessons: List[Lesson] = []
        for row in self._load().get("lessons", []):
            try:
                lessons.append(records.parse_lesson(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid lesson row %r: %s", row, exc)
        return lessons

    def get_lesson(self, lesson_id: str) -> Lesson | None:
        """Find a lesson by id."""
        for row in self._load().get("lessons", []):
            if not isinstance(row, Mapping) or str(row.get("id")) != lesson_id:
                continue
            try:
                return records.parse_lesson(row)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid lesson row %r: %s", row, exc)
        return None

    def get_occupied_bookings(self, day: DateTime) -> List[OccupiedInterval]:
        """Return pending and confirmed bookings on ``day``."""
        rows = records.occupying_bookings(self._rows_on_day("bookings", day))
        return self._to_intervals(rows, records.BOOKING_SOURCE)

    def get_blocked_slots(self, day: DateTime) -> List[OccupiedInterval]:
        """Return admin-blocked intervals on ``day``."""
        return self._to_intervals(self._rows_on_day("blockedSlots", day), records.BLOCKED_SOURCE)

    def _rows_on_day(self, collection: str, day: DateTime) -> List[Dict[str, Any]]:
        matching: List[Dict[str, Any]] = []
        for row in self._load().get(collection, []):
            if not isinstance(row, Mapping):
                logger.warning("Skipping %s row that is not an object: %r", collection, row)
                continue
            try:
                if records.is_on_day(row["date"], day, self.timezone):
                    matching.append(row)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping %s row with invalid date %r: %s", collection, row, exc)
        return matching

    @staticmethod
    def _to_intervals(rows: List[Dict[str, Any]], source: str) -> List[OccupiedInterval]:
        intervals: List[OccupiedInterval] = []
        for row in rows:
            try:
                intervals.append(records.parse_interval(row, source))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping %s row with invalid times %r: %s", source, row, exc)
        return intervals
