"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityEngine
from .booking_form import BookingFormState, FormOptions, derive_options
from .models import ExistingReservation, Gap, OperatingWindow, SlotPolicy, Weekday

__all__ = [
    "AvailabilityEngine",
    "BookingFormState",
    "FormOptions",
    "derive_options",
    "ExistingReservation",
    "Gap",
    "OperatingWindow",
    "SlotPolicy",
    "Weekday",
]
