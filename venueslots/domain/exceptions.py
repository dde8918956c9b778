"""
Domain-specific exception hierarchy for the venueslots application.
"""

from typing import List, Sequence


class VenueSlotsError(Exception):
    """Base class for all application-level errors."""


class BookingStoreError(VenueSlotsError):
    """Raised when venue or reservation data cannot be fetched, stored or parsed."""


class NotificationError(VenueSlotsError):
    """Raised when participant notifications cannot be dispatched."""


class SlotUnavailableError(VenueSlotsError):
    """Raised at commit time when the requested interval is no longer free."""

    def __init__(self, message: str, conflicts: Sequence = ()) -> None:
        super().__init__(message)
        self.conflicts: List = list(conflicts)
