"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import AvailabilityService, AvailablePlace, BookingStoreProtocol
from .booking_commit import BookingCommitService, BookingRequest, NotifierProtocol

__all__ = [
    "AvailabilityService",
    "AvailablePlace",
    "BookingStoreProtocol",
    "BookingCommitService",
    "BookingRequest",
    "NotifierProtocol",
]
