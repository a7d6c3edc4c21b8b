"""
Shared fixtures: a small booking database as a JSON document.
"""

import json

import pytest

SAMPLE_DATA = {
    "settings": [
        {"category": "general", "key": "working_start_time", "value": "08:00"},
        {"category": "general", "key": "working_end_time", "value": "18:00"},
        {"category": "general", "key": "break_start_time", "value": "12:00"},
        {"category": "general", "key": "break_end_time", "value": "13:00"},
    ],
    "lessons": [
        {"id": "automatic", "name": "Körlektion - Automat", "duration": 60, "isActive": True},
        {"id": "theory", "name": "Teorilektion", "duration": 45, "isActive": True},
        {"id": "retired", "name": "Gammal lektion", "duration": 60, "isActive": False},
        {"id": "broken", "name": "Trasig", "duration": "sixty"},
    ],
    "bookings": [
        {"date": "2025-03-10", "startTime": "09:00", "endTime": "10:00", "status": "CONFIRMED"},
        {"date": "2025-03-10", "startTime": "14:00", "endTime": "15:30", "status": "PENDING"},
        {"date": "2025-03-10", "startTime": "16:00", "endTime": "17:00", "status": "CANCELLED"},
        {"date": "2025-03-11", "startTime": "08:00", "endTime": "09:00", "status": "CONFIRMED"},
    ],
    "blockedSlots": [
        {"date": "2025-03-10", "startTime": "15:30", "endTime": "16:30"},
    ],
}


@pytest.fixture
def data_file(tmp_path):
    """Write the sample document and return its path."""
    path = tmp_path / "data.json"
    path.write_text(json.dumps(SAMPLE_DATA), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path, data_file):
    """Config pointing at the sample document with a relative path."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "timezone: Europe/Stockholm\n"
        f"data_file: {data_file.name}\n",
        encoding="utf-8",
    )
    return path
