"""
Tests for the offline mock booking backend.
"""

import json
import logging

from venueslots.adapters.mock_booking_client import MockBookingClient


def _write_data(tmp_path, data):
    data_file = tmp_path / "mock.json"
    data_file.write_text(json.dumps(data), encoding="utf-8")
    return data_file


def test_malformed_configuration_is_skipped_with_warning(tmp_path, caplog):
    data_file = _write_data(tmp_path, {
        "place_configuration": [
            {"place_id": "room-a", "start_time": "08:00:00", "end_time": "17:00:00", "available_monday": True},
            {"place_id": "broken", "start_time": "late", "end_time": "17:00:00"},
        ],
    })
    client = MockBookingClient(data_file=data_file)

    with caplog.at_level(logging.WARNING):
        windows = client.get_windows()

    assert list(windows) == ["room-a"]
    assert "broken" in caplog.text


def test_malformed_booking_is_skipped_with_warning(tmp_path, caplog):
    data_file = _write_data(tmp_path, {
        "bookings": [
            {"id": "b-1", "place_id": "room-a", "booking_date": "2025-03-03",
             "start_time": "09:00:00", "end_time": "10:00:00", "status": "confirmed"},
            {"id": "b-2", "place_id": "room-a", "booking_date": "2025-03-03",
             "start_time": "12:00:00", "end_time": "11:00:00", "status": "confirmed"},
        ],
    })
    client = MockBookingClient(data_file=data_file)

    with caplog.at_level(logging.WARNING):
        reservations = client.get_reservations("room-a", "2025-03-03")

    assert [r.booking_id for r in reservations] == ["b-1"]
    assert "b-2" in caplog.text
