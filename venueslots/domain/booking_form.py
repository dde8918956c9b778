"""
Explicit booking-form state and the options derived from it.

The form is a single immutable value. Each user action is one transition
that returns a new state and clears every selection depending on what
changed; the pickers' option lists are then recomputed from scratch by
``derive_options``.
"""

from dataclasses import dataclass, field, replace
from typing import List, Sequence

from .availability import AvailabilityEngine
from .models import ExistingReservation, Gap, OperatingWindow, SlotPolicy, Weekday


@dataclass(frozen=True)
class BookingFormState:
    """Current selections of the booking form. Empty string means unset."""
    date: str = ""
    place_id: str = ""
    gap_label: str = ""
    start_time: str = ""
    end_time: str = ""

    def with_date(self, date: str) -> "BookingFormState":
        """Pick a date; gap, start and end no longer apply."""
        if date == self.date:
            return self
        return replace(self, date=date, gap_label="", start_time="", end_time="")

    def with_place(self, place_id: str) -> "BookingFormState":
        """Pick a venue; gap, start and end no longer apply."""
        if place_id == self.place_id:
            return self
        return replace(self, place_id=place_id, gap_label="", start_time="", end_time="")

    def with_gap(self, gap_label: str) -> "BookingFormState":
        """Pick a gap; start and end are reset."""
        if gap_label == self.gap_label:
            return self
        return replace(self, gap_label=gap_label, start_time="", end_time="")

    def with_start(self, start_time: str, end_times: Sequence[str] = ()) -> "BookingFormState":
        """
        Pick a start time.

        The current end survives only if it is one of ``end_times``, the end
        times offered for the new start; otherwise it is reset.
        """
        if start_time == self.start_time:
            return self
        end_time = self.end_time if self.end_time in end_times else ""
        return replace(self, start_time=start_time, end_time=end_time)

    def with_end(self, end_time: str) -> "BookingFormState":
        return replace(self, end_time=end_time)

    @property
    def is_complete(self) -> bool:
        return all((self.date, self.place_id, self.start_time, self.end_time))


@dataclass(frozen=True)
class FormOptions:
    """Option lists offered by the booking form for a given state."""
    gaps: List[Gap] = field(default_factory=list)
    selected_gap: Gap | None = None
    start_times: List[str] = field(default_factory=list)
    end_times: List[str] = field(default_factory=list)
    serving_times: List[str] = field(default_factory=list)


def derive_options(
    state: BookingFormState,
    window: OperatingWindow | None,
    weekday: Weekday | None,
    reservations: Sequence[ExistingReservation],
    engine: AvailabilityEngine,
    policy: SlotPolicy | None = None,
    serving_interval_minutes: int = 15
) -> FormOptions:
    """
    Compute every option list for the form in one pass.

    Selections that are not valid for the current inputs (for example a
    start time outside the selected gap) yield empty dependent lists rather
    than stale options.
    """
    if window is None or weekday is None or not state.date or not state.place_id:
        return FormOptions()

    policy = policy or SlotPolicy()
    step = policy.start_step(window)
    min_duration = policy.min_duration(window)

    gaps = engine.compute_gaps(
        window,
        weekday,
        reservations,
        threshold_minutes=policy.gap_threshold(window)
    )
    selected_gap = next((g for g in gaps if g.label == state.gap_label), None)

    start_times: List[str] = []
    end_times: List[str] = []
    if selected_gap is not None:
        start_times = engine.compute_start_times(selected_gap, step, min_duration)
        if state.start_time in start_times:
            end_times = engine.compute_end_times(selected_gap, state.start_time, step, min_duration)

    serving_times: List[str] = []
    if state.start_time in start_times and state.end_time in end_times:
        serving_times = engine.compute_serving_window(
            state.start_time,
            state.end_time,
            serving_interval_minutes
        )

    return FormOptions(
        gaps=gaps,
        selected_gap=selected_gap,
        start_times=start_times,
        end_times=end_times,
        serving_times=serving_times,
    )
