"""
Core business logic for computing free gaps and selectable booking times.

Pure domain logic without any external dependencies (no API calls, no
database, no I/O). Every call receives its full input, so results depend
only on the arguments.
"""

from typing import Iterable, List, Sequence

from .models import ExistingReservation, Gap, OperatingWindow, Weekday
from .timeconv import minutes_to_time, time_to_minutes

# Last refreshment serving time is this many minutes before the booking ends
SERVING_END_LEAD_MINUTES = 15


class AvailabilityEngine:
    """
    Computes availability within a venue's operating window.

    Algorithm for gaps:
    1. Convert open/close times to minutes from midnight
    2. Sort reservations by start time
    3. Sweep a cursor from opening time, emitting the free space before
       each reservation and advancing past its end
    4. Emit the trailing space up to closing time
    5. Keep only gaps at least as long as the threshold
    """

    def compute_gaps(
        self,
        window: OperatingWindow | None,
        weekday: Weekday,
        reservations: Iterable[ExistingReservation],
        threshold_minutes: int | None = None
    ) -> List[Gap]:
        """
        Find all free gaps for one venue on one day.

        Args:
            window: Operating hours of the venue (None if unconfigured)
            weekday: Day of the week being booked
            reservations: Non-cancelled reservations for that venue and date
            threshold_minutes: Minimum gap length, defaults to the slot granularity

        Returns:
            Non-overlapping gaps in ascending start order
        """
        if window is None or not window.accepts_bookings_on(weekday):
            return []

        threshold = window.slot_granularity_minutes if threshold_minutes is None else threshold_minutes
        open_minutes = window.open_minutes
        close_minutes = window.close_minutes

        if threshold <= 0 or open_minutes >= close_minutes:
            return []

        gaps: List[Gap] = []
        current = open_minutes

        # sorted() is stable; ties keep caller order
        for reservation in sorted(reservations, key=lambda r: r.start_minutes):
            if current < reservation.start_minutes:
                self._emit_gap(gaps, current, min(reservation.start_minutes, close_minutes), threshold)

            # max() merges overlapping and nested reservations
            current = max(current, reservation.end_minutes)

        if current < close_minutes:
            self._emit_gap(gaps, current, close_minutes, threshold)

        return gaps

    @staticmethod
    def _emit_gap(gaps: List[Gap], start: int, end: int, threshold: int) -> None:
        if end - start >= threshold:
            gaps.append(Gap(start_minutes=start, end_minutes=end))

    def compute_start_times(
        self,
        gap: Gap,
        granularity: int,
        min_duration: int | None = None
    ) -> List[str]:
        """
        Selectable start times within a gap.

        Every start leaves at least ``min_duration`` minutes before the gap
        ends. ``min_duration`` defaults to ``granularity``.

        Example:
        Gap: 09:00 - 12:00, granularity 30, min duration 60
        Result: [09:00, 09:30, 10:00, 10:30, 11:00]
        """
        return [minutes_to_time(t) for t in self._start_minutes(gap, granularity, min_duration)]

    def _start_minutes(self, gap: Gap, granularity: int, min_duration: int | None) -> List[int]:
        duration = granularity if min_duration is None else min_duration
        if granularity <= 0 or duration <= 0:
            return []

        starts: List[int] = []
        t = gap.start_minutes
        while t + duration <= gap.end_minutes:
            starts.append(t)
            t += granularity
        return starts

    def compute_end_times(
        self,
        gap: Gap,
        chosen_start: str,
        granularity: int,
        min_duration: int | None = None
    ) -> List[str]:
        """
        Selectable end times for a chosen start within a gap.

        Returns an empty list when ``chosen_start`` is not one of the gap's
        selectable start times.

        Example:
        Gap: 09:00 - 12:00, start 10:00, granularity 30, min duration 60
        Result: [11:00, 11:30, 12:00]
        """
        duration = granularity if min_duration is None else min_duration
        try:
            start = time_to_minutes(chosen_start)
        except ValueError:
            return []

        if start not in self._start_minutes(gap, granularity, duration):
            return []

        ends: List[str] = []
        t = start + duration
        while t <= gap.end_minutes:
            ends.append(minutes_to_time(t))
            t += granularity
        return ends

    def compute_serving_window(
        self,
        booking_start: str,
        booking_end: str,
        interval_minutes: int = 15
    ) -> List[str]:
        """
        Refreshment serving times for a booking.

        Runs from the booking start up to 15 minutes before its end,
        inclusive, in steps of ``interval_minutes``.
        """
        if interval_minutes <= 0:
            return []

        start = time_to_minutes(booking_start)
        last = time_to_minutes(booking_end) - SERVING_END_LEAD_MINUTES

        return [minutes_to_time(t) for t in range(start, last + 1, interval_minutes)]

    def find_conflicts(
        self,
        reservations: Iterable[ExistingReservation],
        start_minutes: int,
        end_minutes: int
    ) -> List[ExistingReservation]:
        """Reservations that overlap ``[start, end)``, in start order."""
        conflicts = [r for r in reservations if r.overlaps(start_minutes, end_minutes)]
        return sorted(conflicts, key=lambda r: r.start_minutes)

    @staticmethod
    def total_free_minutes(gaps: Sequence[Gap]) -> int:
        """Sum of all gap durations."""
        return sum(gap.duration_minutes() for gap in gaps)
