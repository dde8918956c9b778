"""
Application service for venue availability.

The service fetches operating windows and reservation snapshots through a
booking-store adapter and delegates the calculation to the domain-level
``AvailabilityEngine``. Keeping the store behind a protocol lets the CLI
use the REST client or the mock client interchangeably, and tests plug in
a stub.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Sequence

import pendulum

from ..domain.availability import AvailabilityEngine
from ..domain.booking_form import BookingFormState, FormOptions, derive_options
from ..domain.models import ExistingReservation, Gap, OperatingWindow, SlotPolicy, Weekday

logger = logging.getLogger(__name__)


class BookingStoreProtocol(Protocol):
    """Protocol describing the booking store behaviour needed by the services."""

    def get_places(self, active_only: bool = True) -> List[Dict[str, Any]]:
        """Return place records."""

    def get_windows(self) -> Dict[str, OperatingWindow]:
        """Return operating windows keyed by place id."""

    def get_window(self, place_id: str) -> OperatingWindow | None:
        """Return one place's operating window."""

    def get_reservations(self, place_id: str, booking_date: str) -> List[ExistingReservation]:
        """Return active reservations for a place on a date."""

    def create_reservation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Persist a booking."""

    def update_reservation(self, booking_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Update a booking."""


@dataclass(frozen=True)
class AvailablePlace:
    """A place that accepts bookings on a given date."""
    id: str
    name: str
    window: OperatingWindow

    @property
    def operating_hours(self) -> str:
        return self.window.operating_hours()


def weekday_of(booking_date: str, timezone: str = "Europe/Berlin") -> Weekday:
    """
    Weekday of a ``YYYY-MM-DD`` date.

    Raises:
        ValueError: If the date cannot be parsed
    """
    return Weekday.from_date(pendulum.from_format(booking_date, "YYYY-MM-DD", tz=timezone))


class AvailabilityService:
    """
    Orchestrates snapshot retrieval and availability calculation.

    Every call fetches a fresh snapshot, so the results always reflect the
    store at call time.
    """

    def __init__(
        self,
        store: BookingStoreProtocol,
        engine: AvailabilityEngine | None = None,
        policy: SlotPolicy | None = None,
        timezone: str = "Europe/Berlin",
        serving_interval_minutes: int = 15,
    ) -> None:
        self._store = store
        self._engine = engine or AvailabilityEngine()
        self._policy = policy or SlotPolicy()
        self._timezone = timezone
        self._serving_interval = serving_interval_minutes

    @property
    def engine(self) -> AvailabilityEngine:
        return self._engine

    @property
    def policy(self) -> SlotPolicy:
        return self._policy

    def get_window(self, place_id: str) -> OperatingWindow | None:
        return self._store.get_window(place_id)

    def get_reservations(
        self,
        place_id: str,
        booking_date: str,
        exclude_booking_id: str | None = None,
    ) -> List[ExistingReservation]:
        """
        Reservation snapshot for a place and date.

        ``exclude_booking_id`` drops the booking being edited so that its
        own interval counts as free.
        """
        reservations = self._store.get_reservations(place_id, booking_date)
        if exclude_booking_id is not None:
            reservations = [r for r in reservations if r.booking_id != str(exclude_booking_id)]
        logger.debug(
            "%d reservation(s) for place %s on %s", len(reservations), place_id, booking_date
        )
        return reservations

    def find_gaps(
        self,
        place_id: str,
        booking_date: str,
        exclude_booking_id: str | None = None,
    ) -> List[Gap]:
        """Free gaps of a place on a date."""
        window = self.get_window(place_id)
        if window is None:
            logger.info("Place %s has no configuration", place_id)
            return []

        reservations = self.get_reservations(place_id, booking_date, exclude_booking_id)
        return self._engine.compute_gaps(
            window,
            weekday_of(booking_date, self._timezone),
            reservations,
            threshold_minutes=self._policy.gap_threshold(window),
        )

    def find_gap(
        self,
        place_id: str,
        booking_date: str,
        gap_label: str,
        exclude_booking_id: str | None = None,
    ) -> Gap | None:
        """Look up a gap by its ``HH:MM - HH:MM`` label."""
        for gap in self.find_gaps(place_id, booking_date, exclude_booking_id):
            if gap.label == gap_label:
                return gap
        return None

    def start_times(self, place_id: str, booking_date: str, gap_label: str) -> List[str]:
        """Selectable start times inside a gap; empty if the gap no longer exists."""
        window = self.get_window(place_id)
        gap = self.find_gap(place_id, booking_date, gap_label)
        if window is None or gap is None:
            return []
        return self._engine.compute_start_times(
            gap,
            self._policy.start_step(window),
            self._policy.min_duration(window),
        )

    def end_times(
        self,
        place_id: str,
        booking_date: str,
        gap_label: str,
        start_time: str,
    ) -> List[str]:
        """Selectable end times for a start inside a gap."""
        window = self.get_window(place_id)
        gap = self.find_gap(place_id, booking_date, gap_label)
        if window is None or gap is None:
            return []
        return self._engine.compute_end_times(
            gap,
            start_time,
            self._policy.start_step(window),
            self._policy.min_duration(window),
        )

    def serving_times(self, start_time: str, end_time: str) -> List[str]:
        """Refreshment serving options for a booking interval."""
        return self._engine.compute_serving_window(start_time, end_time, self._serving_interval)

    def available_places(self, booking_date: str) -> List[AvailablePlace]:
        """Active places whose configuration accepts bookings on the date."""
        weekday = weekday_of(booking_date, self._timezone)
        windows = self._store.get_windows()
        places: List[AvailablePlace] = []

        for place in self._store.get_places(active_only=True):
            place_id = str(place.get("id"))
            window = windows.get(place_id)
            if window is None or not window.accepts_bookings_on(weekday):
                continue
            places.append(
                AvailablePlace(id=place_id, name=place.get("name", place_id), window=window)
            )

        return places

    def form_options(
        self,
        state: BookingFormState,
        exclude_booking_id: str | None = None,
    ) -> FormOptions:
        """Option lists for a booking form state, from a fresh snapshot."""
        if not state.date or not state.place_id:
            return FormOptions()

        window = self.get_window(state.place_id)
        reservations = self.get_reservations(state.place_id, state.date, exclude_booking_id)
        return derive_options(
            state,
            window,
            weekday_of(state.date, self._timezone),
            reservations,
            self._engine,
            self._policy,
            self._serving_interval,
        )

    def summarize(self, gaps: Sequence[Gap]) -> Dict[str, int]:
        """Gap count and total free time, as shown by the availability checker."""
        total = self._engine.total_free_minutes(gaps)
        return {"gaps": len(gaps), "free_minutes": total, "hours": total // 60, "minutes": total % 60}
