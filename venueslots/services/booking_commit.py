"""
Commit-time validation and persistence of bookings.

Gaps shown to the user come from a snapshot that may be stale by the time
the booking is submitted. Before writing, the commit service reloads the
place's window and reservations and re-runs the same overlap check the
availability engine uses; a conflict is reported instead of persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence

from ..domain.exceptions import NotificationError, SlotUnavailableError
from ..domain.timeconv import minutes_to_time, time_to_minutes
from .availability_service import AvailabilityService, weekday_of

logger = logging.getLogger(__name__)


def _clock_with_seconds(value: str) -> str:
    """Normalise ``H:MM``/``HH:MM[:SS]`` to the backend's ``HH:MM:00``."""
    return f"{minutes_to_time(time_to_minutes(value))}:00"


class NotifierProtocol(Protocol):
    """Anything that can hand booking details to participants."""

    def send_booking_details(self, booking_id: str, emails: Sequence[str]) -> Dict[str, Any]:
        """Send booking details to the given addresses."""


@dataclass
class BookingRequest:
    """A booking as submitted from the booking form."""
    place_id: str
    date: str
    start_time: str
    end_time: str
    title: str
    description: str = ""
    booking_id: str | None = None  # set when updating an existing booking
    participant_emails: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        """Record sent to the booking backend."""
        payload = {
            "title": self.title,
            "description": self.description,
            "place_id": self.place_id,
            "booking_date": self.date,
            "start_time": _clock_with_seconds(self.start_time),
            "end_time": _clock_with_seconds(self.end_time),
        }
        payload.update(self.extra)
        return payload


class BookingCommitService:
    """Validates a booking against the latest snapshot, then persists it."""

    def __init__(
        self,
        availability: AvailabilityService,
        store,
        notifier: NotifierProtocol | None = None,
        timezone: str = "Europe/Berlin",
    ) -> None:
        self._availability = availability
        self._store = store
        self._notifier = notifier
        self._timezone = timezone

    def validate(self, request: BookingRequest) -> None:
        """
        Check a request against the current state of the store.

        Raises:
            SlotUnavailableError: If the interval cannot be booked
            ValueError: If the date or times are malformed
        """
        start = time_to_minutes(request.start_time)
        end = time_to_minutes(request.end_time)
        if start >= end:
            raise SlotUnavailableError(
                f"Start {request.start_time} must be before end {request.end_time}"
            )

        window = self._availability.get_window(request.place_id)
        if window is None:
            raise SlotUnavailableError(f"Place {request.place_id} has no booking configuration")

        weekday = weekday_of(request.date, self._timezone)
        if not window.accepts_bookings_on(weekday):
            raise SlotUnavailableError(
                f"Place {request.place_id} does not accept bookings on {weekday.value}"
            )

        if start < window.open_minutes or end > window.close_minutes:
            raise SlotUnavailableError(
                f"{request.start_time} - {request.end_time} is outside operating hours "
                f"{window.operating_hours()}"
            )

        min_duration = self._availability.policy.min_duration(window)
        if end - start < min_duration:
            raise SlotUnavailableError(f"Bookings must last at least {min_duration} minutes")

        reservations = self._availability.get_reservations(
            request.place_id,
            request.date,
            exclude_booking_id=request.booking_id,
        )
        conflicts = self._availability.engine.find_conflicts(reservations, start, end)
        if conflicts:
            booked = ", ".join(str(c) for c in conflicts)
            raise SlotUnavailableError(
                f"Slot no longer available: {request.start_time} - {request.end_time} "
                f"overlaps {booked}",
                conflicts=conflicts,
            )

    def commit(self, request: BookingRequest) -> Dict[str, Any]:
        """
        Validate and persist a booking, then notify participants.

        A failed notification is logged; the booking stays committed.

        Returns:
            The stored booking record

        Raises:
            SlotUnavailableError: If the slot is no longer available
        """
        self.validate(request)

        payload = request.to_payload()
        if request.booking_id is not None:
            record = self._store.update_reservation(request.booking_id, payload)
            logger.info("Updated booking %s", request.booking_id)
        else:
            record = self._store.create_reservation(payload)
            logger.info("Created booking %s", record.get("id"))

        booking_id = record.get("id", request.booking_id)
        if self._notifier is not None and request.participant_emails and booking_id is not None:
            try:
                self._notifier.send_booking_details(str(booking_id), request.participant_emails)
            except NotificationError as exc:
                logger.warning("Booking %s saved but notification failed: %s", booking_id, exc)

        return record
