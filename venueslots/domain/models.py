"""
Domain models for venue operating hours, reservations and free gaps.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import FrozenSet, Iterable

from .timeconv import format_duration, minutes_to_time, time_to_minutes


class Weekday(str, Enum):
    """Days of the week, named the way the venue configuration store names them."""
    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        """Weekday of a calendar date (works for pendulum dates as well)."""
        # isoweekday: Monday=1 .. Sunday=7
        return list(cls)[day.isoweekday() % 7]

    @property
    def flag_name(self) -> str:
        """Name of the availability flag in the configuration store."""
        return f"available_{self.value}"


WORKING_WEEK: FrozenSet[Weekday] = frozenset({
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
})


@dataclass(frozen=True)
class OperatingWindow:
    """
    Per-venue daily operating hours.

    Times are ``HH:MM`` or ``HH:MM:SS`` strings; seconds are ignored.
    Validation (open before close, positive granularity) belongs to the
    configuration layer; the availability engine assumes well-formed input.
    """
    open_time: str
    close_time: str
    slot_granularity_minutes: int
    available_weekdays: FrozenSet[Weekday] = WORKING_WEEK
    bookings_enabled: bool = True
    max_bookings_per_day: int | None = None

    @property
    def open_minutes(self) -> int:
        return time_to_minutes(self.open_time)

    @property
    def close_minutes(self) -> int:
        return time_to_minutes(self.close_time)

    def accepts_bookings_on(self, weekday: Weekday) -> bool:
        """True if the venue takes bookings at all on the given weekday."""
        return self.bookings_enabled and weekday in self.available_weekdays

    def operating_hours(self) -> str:
        """Operating hours in ``HH:MM - HH:MM`` form."""
        return f"{minutes_to_time(self.open_minutes)} - {minutes_to_time(self.close_minutes)}"


@dataclass(frozen=True)
class ExistingReservation:
    """
    A non-cancelled reservation on one venue and date.

    Invariant: start must be before end.
    """
    start_minutes: int
    end_minutes: int
    booking_id: str | None = field(default=None, compare=False)
    title: str = field(default="", compare=False)

    def __post_init__(self):
        if self.start_minutes >= self.end_minutes:
            raise ValueError(
                f"Reservation start {minutes_to_time(self.start_minutes)} must be "
                f"before end {minutes_to_time(self.end_minutes)}"
            )

    @classmethod
    def from_times(
        cls,
        start_time: str,
        end_time: str,
        booking_id: str | None = None,
        title: str = ""
    ) -> "ExistingReservation":
        """Build a reservation from ``HH:MM`` strings."""
        return cls(
            start_minutes=time_to_minutes(start_time),
            end_minutes=time_to_minutes(end_time),
            booking_id=booking_id,
            title=title,
        )

    def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
        """Check if this reservation overlaps ``[start, end)``."""
        return self.start_minutes < end_minutes and self.end_minutes > start_minutes

    def __str__(self) -> str:
        return f"{minutes_to_time(self.start_minutes)} - {minutes_to_time(self.end_minutes)}"


@dataclass(frozen=True)
class Gap:
    """A free interval ``[start, end)`` inside a venue's operating window."""
    start_minutes: int
    end_minutes: int

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end_minutes - self.start_minutes

    @property
    def start_time(self) -> str:
        return minutes_to_time(self.start_minutes)

    @property
    def end_time(self) -> str:
        return minutes_to_time(self.end_minutes)

    @property
    def label(self) -> str:
        """Key used by pickers to refer to this gap, e.g. ``09:00 - 12:00``."""
        return f"{self.start_time} - {self.end_time}"

    def format_display(self) -> str:
        """
        Format the gap for display.
        Format: HH:MM – HH:MM (1h 30min)
        """
        return f"{self.start_time} – {self.end_time} ({format_duration(self.duration_minutes())})"


@dataclass(frozen=True)
class SlotPolicy:
    """
    The three slot-related parameters a venue uses.

    Each one falls back to the venue's configured slot granularity, so an
    empty policy reproduces the single-value behaviour of the booking screens.
    """
    min_duration_minutes: int | None = None
    start_step_minutes: int | None = None
    gap_threshold_minutes: int | None = None

    def min_duration(self, window: OperatingWindow) -> int:
        return window.slot_granularity_minutes if self.min_duration_minutes is None else self.min_duration_minutes

    def start_step(self, window: OperatingWindow) -> int:
        return window.slot_granularity_minutes if self.start_step_minutes is None else self.start_step_minutes

    def gap_threshold(self, window: OperatingWindow) -> int:
        return window.slot_granularity_minutes if self.gap_threshold_minutes is None else self.gap_threshold_minutes


def weekdays_from_flags(flags: Iterable[str]) -> FrozenSet[Weekday]:
    """
    Parse weekday names such as ``"monday"`` or ``"available_monday"``.

    Raises:
        ValueError: If a name is not a weekday
    """
    days = set()
    for flag in flags:
        name = flag.strip().lower()
        if name.startswith("available_"):
            name = name[len("available_"):]
        days.add(Weekday(name))
    return frozenset(days)
