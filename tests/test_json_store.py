"""
Tests for the JSON file data source.
"""

import json
import logging

import pendulum
import pytest

from lessonslots.adapters import records
from lessonslots.adapters.json_store import JsonDataStore
from lessonslots.domain.exceptions import DataSourceError

TZ = "Europe/Stockholm"
DAY = pendulum.datetime(2025, 3, 10, tz=TZ)


def _times(intervals):
    return [(str(interval.start), str(interval.end)) for interval in intervals]


class TestJsonDataStore:
    """Tests for JsonDataStore."""

    def test_settings_are_upper_cased(self, data_file):
        store = JsonDataStore(data_file, timezone=TZ)

        settings = store.get_settings()

        assert settings["WORKING_START_TIME"] == "08:00"
        assert settings["BREAK_END_TIME"] == "13:00"

    def test_lessons_skip_invalid_rows(self, data_file, caplog):
        store = JsonDataStore(data_file, timezone=TZ)

        with caplog.at_level(logging.WARNING):
            lessons = store.list_lessons()

        assert [lesson.id for lesson in lessons] == ["automatic", "theory", "retired"]
        assert "Skipping invalid lesson row" in caplog.text

    def test_get_lesson(self, data_file):
        store = JsonDataStore(data_file, timezone=TZ)

        assert store.get_lesson("theory").duration_minutes == 45
        assert store.get_lesson("retired").is_active is False
        assert store.get_lesson("unknown") is None

    def test_bookings_filtered_by_day_and_status(self, data_file):
        store = JsonDataStore(data_file, timezone=TZ)

        bookings = store.get_occupied_bookings(DAY)

        assert _times(bookings) == [("09:00", "10:00"), ("14:00", "15:30")]
        assert {booking.source for booking in bookings} == {"booking"}

    def test_blocked_slots(self, data_file):
        store = JsonDataStore(data_file, timezone=TZ)

        blocked = store.get_blocked_slots(DAY)

        assert _times(blocked) == [("15:30", "16:30")]
        assert blocked[0].source == "blocked"
        assert store.get_blocked_slots(DAY.add(days=1)) == []

    def test_utc_timestamps_use_local_day(self, tmp_path):
        """A booking stored at 23:30 UTC belongs to the next local day."""
        path = tmp_path / "data.json"
        path.write_text(json.dumps({
            "bookings": [
                {"date": "2025-03-09T23:30:00.000Z", "startTime": "10:00",
                 "endTime": "11:00", "status": "PENDING"},
            ],
        }), encoding="utf-8")
        store = JsonDataStore(path, timezone=TZ)

        assert _times(store.get_occupied_bookings(DAY)) == [("10:00", "11:00")]
        assert store.get_occupied_bookings(DAY.subtract(days=1)) == []

    def test_invalid_rows_are_skipped(self, tmp_path, caplog):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({
            "blockedSlots": [
                {"date": "not a date", "startTime": "10:00", "endTime": "11:00"},
                {"date": "2025-03-10", "startTime": "10", "endTime": "11:00"},
                {"startTime": "10:00", "endTime": "11:00"},
                {"date": "2025-03-10", "startTime": "12:00", "endTime": "12:30"},
            ],
        }), encoding="utf-8")
        store = JsonDataStore(path, timezone=TZ)

        with caplog.at_level(logging.WARNING):
            blocked = store.get_blocked_slots(DAY)

        assert _times(blocked) == [("12:00", "12:30")]
        assert "invalid date" in caplog.text
        assert "invalid times" in caplog.text

    def test_non_object_rows_are_skipped(self, tmp_path, caplog):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({
            "lessons": ["junk", None, {"id": "a", "name": "Teori", "duration": 45}],
            "blockedSlots": ["junk", {"date": "2025-03-10", "startTime": "12:00", "endTime": "12:30"}],
        }), encoding="utf-8")
        store = JsonDataStore(path, timezone=TZ)

        with caplog.at_level(logging.WARNING):
            lessons = store.list_lessons()
            blocked = store.get_blocked_slots(DAY)

        assert [lesson.id for lesson in lessons] == ["a"]
        assert store.get_lesson("a").duration_minutes == 45
        assert _times(blocked) == [("12:00", "12:30")]
        assert "not an object" in caplog.text

    def test_missing_file(self, tmp_path):
        store = JsonDataStore(tmp_path / "missing.json", timezone=TZ)

        with pytest.raises(DataSourceError, match="not found"):
            store.get_settings()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(DataSourceError, match="Could not read"):
            JsonDataStore(path, timezone=TZ).get_settings()

    def test_root_must_be_object(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(DataSourceError, match="JSON object"):
            JsonDataStore(path, timezone=TZ).get_settings()


class TestRecords:
    """Tests for row conversion helpers."""

    def test_settings_from_mapping(self):
        assert records.settings_to_map({"working_end_time": "17:00", "x": None}) == {
            "WORKING_END_TIME": "17:00",
        }

    def test_later_setting_row_wins(self):
        rows = [
            {"category": "general", "key": "break_start_time", "value": "11:00"},
            {"category": "admin", "key": "BREAK_START_TIME", "value": "11:30"},
        ]

        assert records.settings_to_map(rows) == {"BREAK_START_TIME": "11:30"}

    def test_unknown_status_is_not_occupying(self):
        rows = [
            {"status": "confirmed"},
            {"status": "NO_SHOW"},
            {},
        ]

        assert records.occupying_bookings(rows) == [{"status": "confirmed"}]
