"""
Mock booking backend for running without a server.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ..domain.exceptions import BookingStoreError
from ..domain.models import ExistingReservation, OperatingWindow
from .records import (
    is_active_booking,
    matches_place_and_date,
    reservation_from_record,
    window_from_record,
)

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_booking_data.json"


class MockBookingClient:
    """
    In-memory stand-in for the booking backend.

    Loads places, place configurations and bookings from a JSON file in
    the backend's record format. Venues defined in the application config
    override the file's places and configurations. Writes and notifications
    are kept in memory so tests can inspect them.
    """

    def __init__(self, config=None, data_file: Path | None = None, timezone: str = "Europe/Berlin"):
        """
        Initialize the mock client.

        Args:
            config: Optional AppConfig whose venues take precedence
            data_file: JSON file with ``places``, ``place_configuration`` and ``bookings``
            timezone: Timezone used to normalise booking dates
        """
        self.config = config
        self.timezone = config.timezone if config is not None else timezone
        self.sent_notifications: List[Dict[str, Any]] = []
        self._next_id = 1
        self._load_data(data_file or DEFAULT_DATA_FILE)

    def _load_data(self, data_file: Path) -> None:
        """Load mock records from JSON file."""
        data: Dict[str, Any] = {}
        if data_file.exists():
            with open(data_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            logger.warning("Mock data file %s not found, starting empty", data_file)

        self.places: List[Dict[str, Any]] = data.get("places", [])
        self.configurations: List[Dict[str, Any]] = data.get("place_configuration", [])
        self.bookings: List[Dict[str, Any]] = data.get("bookings", [])

    def get_places(self, active_only: bool = True) -> List[Dict[str, Any]]:
        if self.config is not None and self.config.venues:
            return [{"id": v.id, "name": v.name, "is_active": True} for v in self.config.venues]
        return [p for p in self.places if p.get("is_active", True) or not active_only]

    def get_windows(self) -> Dict[str, OperatingWindow]:
        if self.config is not None and self.config.venues:
            return {v.id: v.to_window(self.config.defaults) for v in self.config.venues}

        windows: Dict[str, OperatingWindow] = {}
        for record in self.configurations:
            place_id = str(record.get("place_id", ""))
            try:
                windows[place_id] = window_from_record(record)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Skipping mock configuration of place %s: %s", place_id, e)
        return windows

    def get_window(self, place_id: str) -> OperatingWindow | None:
        return self.get_windows().get(str(place_id))

    def get_reservations(self, place_id: str, booking_date: str) -> List[ExistingReservation]:
        reservations: List[ExistingReservation] = []

        for record in self.bookings:
            if not is_active_booking(record):
                continue
            if not matches_place_and_date(record, place_id, booking_date, self.timezone):
                continue
            try:
                reservations.append(reservation_from_record(record))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping mock booking %s: %s", record.get("id"), e)

        return reservations

    def create_reservation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(payload)
        record.setdefault("id", f"mock-{self._next_id}")
        record.setdefault("status", "confirmed")
        record.setdefault("is_deleted", 0)
        self._next_id += 1
        self.bookings.append(record)
        return record

    def update_reservation(self, booking_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        for record in self.bookings:
            if str(record.get("id")) == str(booking_id):
                record.update(payload)
                return record
        raise BookingStoreError(f"Unknown booking id: {booking_id}")

    def send_booking_details(self, booking_id: str, emails: Sequence[str]) -> Dict[str, Any]:
        """Record the notification instead of sending it."""
        entry = {"booking_id": booking_id, "emails": list(emails)}
        self.sent_notifications.append(entry)
        return {"success": True, "sent": len(entry["emails"])}
