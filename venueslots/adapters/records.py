"""
Translation of booking-backend records into domain models.

Record shapes (as stored by the backend):

place_configuration:
{
    "place_id": "...",
    "available_monday": true, ..., "available_sunday": false,
    "start_time": "08:00:00",
    "end_time": "17:00:00",
    "allow_bookings": true,
    "max_bookings_per_day": 10,
    "booking_slot_duration": 60
}

bookings:
{
    "id": "...", "title": "...", "place_id": "...",
    "booking_date": "2025-01-15" | "2025-01-14T23:00:00.000Z",
    "start_time": "09:00:00", "end_time": "10:30:00",
    "status": "confirmed", "is_deleted": 0
}
"""

import logging
from typing import Any, Dict

import pendulum

from ..domain.models import ExistingReservation, OperatingWindow, Weekday
from ..domain.timeconv import time_to_minutes

logger = logging.getLogger(__name__)

DEFAULT_SLOT_DURATION = 60
INACTIVE_STATUSES = {"cancelled", "canceled", "rejected"}


def window_from_record(record: Dict[str, Any]) -> OperatingWindow:
    """
    Build an OperatingWindow from a place_configuration record.

    Raises:
        KeyError: If start or end time is missing
        ValueError: If a time cannot be parsed
    """
    weekdays = frozenset(day for day in Weekday if record.get(day.flag_name))

    # Truncate HH:MM:SS to minute precision
    open_time = str(record["start_time"])[:5]
    close_time = str(record["end_time"])[:5]

    # Fail early on unparsable times
    time_to_minutes(open_time)
    time_to_minutes(close_time)

    return OperatingWindow(
        open_time=open_time,
        close_time=close_time,
        slot_granularity_minutes=int(record.get("booking_slot_duration") or DEFAULT_SLOT_DURATION),
        available_weekdays=weekdays,
        bookings_enabled=bool(record.get("allow_bookings", False)),
        max_bookings_per_day=record.get("max_bookings_per_day"),
    )


def is_active_booking(record: Dict[str, Any]) -> bool:
    """False for soft-deleted or cancelled bookings."""
    if record.get("is_deleted") in (1, True, "1", "true"):
        return False
    status = str(record.get("status") or "").lower()
    return status not in INACTIVE_STATUSES


def normalize_booking_date(value: Any, timezone: str) -> str:
    """
    Normalise a stored booking date to ``YYYY-MM-DD``.

    Timestamps are converted to the local timezone first, since the
    backend stores midnight local time as UTC.
    """
    text = str(value)
    if "T" in text:
        return pendulum.parse(text).in_timezone(timezone).to_date_string()
    return text[:10]


def reservation_from_record(record: Dict[str, Any]) -> ExistingReservation:
    """
    Build an ExistingReservation from a bookings record.

    Raises:
        KeyError: If start or end time is missing
        ValueError: If the times are malformed or not ordered
    """
    return ExistingReservation.from_times(
        str(record["start_time"])[:5],
        str(record["end_time"])[:5],
        booking_id=str(record["id"]) if record.get("id") is not None else None,
        title=record.get("title") or "",
    )


def matches_place_and_date(
    record: Dict[str, Any],
    place_id: str,
    booking_date: str,
    timezone: str
) -> bool:
    """True if the booking record belongs to the given place and date."""
    if str(record.get("place_id")) != str(place_id):
        return False
    raw_date = record.get("booking_date")
    if not raw_date:
        return False
    try:
        return normalize_booking_date(raw_date, timezone) == booking_date
    except (ValueError, TypeError) as exc:
        logger.warning("Could not parse booking date %r: %s", raw_date, exc)
        return False
