"""
Tests for the booking form state and derived options.
"""

from venueslots.domain.availability import AvailabilityEngine
from venueslots.domain.booking_form import BookingFormState, derive_options
from venueslots.domain.models import ExistingReservation, OperatingWindow, SlotPolicy, Weekday

WINDOW = OperatingWindow(
    open_time="08:00",
    close_time="17:00",
    slot_granularity_minutes=30,
    available_weekdays=frozenset({Weekday.MONDAY}),
)

RESERVATIONS = [
    ExistingReservation.from_times("09:00", "10:30"),
    ExistingReservation.from_times("10:00", "11:00"),
]


class TestTransitions:
    """State transitions reset dependent selections in one step."""

    def test_changing_place_resets_selection(self):
        state = BookingFormState(
            date="2025-03-03",
            place_id="room-a",
            gap_label="11:00 - 17:00",
            start_time="11:00",
            end_time="12:00",
        )

        changed = state.with_place("hall-1")

        assert changed == BookingFormState(date="2025-03-03", place_id="hall-1")

    def test_changing_date_resets_selection(self):
        state = BookingFormState(date="2025-03-03", place_id="room-a", gap_label="x", start_time="11:00")

        changed = state.with_date("2025-03-04")

        assert changed.gap_label == ""
        assert changed.start_time == ""
        assert changed.place_id == "room-a"

    def test_same_value_keeps_state(self):
        state = BookingFormState(date="2025-03-03", place_id="room-a", start_time="11:00")

        assert state.with_place("room-a") is state
        assert state.with_date("2025-03-03") is state

    def test_changing_start_resets_end(self):
        state = BookingFormState(start_time="11:00", end_time="12:00")

        assert state.with_start("11:30").end_time == ""

    def test_changing_start_keeps_end_still_offered(self):
        state = BookingFormState(
            date="2025-03-03", place_id="room-a", gap_label="11:00 - 17:00", start_time="11:00", end_time="13:00"
        )
        ends = derive_options(
            state.with_start("11:30"), WINDOW, Weekday.MONDAY, RESERVATIONS, AvailabilityEngine()
        ).end_times

        assert state.with_start("11:30", ends).end_time == "13:00"

    def test_changing_start_drops_end_no_longer_offered(self):
        state = BookingFormState(start_time="11:00", end_time="12:00")

        assert state.with_start("12:00", ["12:30", "13:00"]).end_time == ""

    def test_is_complete(self):
        state = BookingFormState(date="2025-03-03", place_id="room-a", start_time="11:00", end_time="12:00")

        assert state.is_complete
        assert not state.with_start("11:30").is_complete


class TestDeriveOptions:
    """Tests for derive_options."""

    def test_without_place_nothing_is_offered(self):
        options = derive_options(
            BookingFormState(date="2025-03-03"), WINDOW, Weekday.MONDAY, RESERVATIONS, AvailabilityEngine()
        )

        assert options.gaps == []
        assert options.selected_gap is None

    def test_gaps_only_until_gap_chosen(self):
        state = BookingFormState(date="2025-03-03", place_id="room-a")

        options = derive_options(state, WINDOW, Weekday.MONDAY, RESERVATIONS, AvailabilityEngine())

        assert [g.label for g in options.gaps] == ["08:00 - 09:00", "11:00 - 17:00"]
        assert options.start_times == []

    def test_full_selection(self):
        state = (
            BookingFormState()
            .with_date("2025-03-03")
            .with_place("room-a")
            .with_gap("08:00 - 09:00")
            .with_start("08:00")
            .with_end("09:00")
        )
        policy = SlotPolicy(min_duration_minutes=60)

        options = derive_options(state, WINDOW, Weekday.MONDAY, RESERVATIONS, AvailabilityEngine(), policy)

        assert options.selected_gap is not None
        assert options.start_times == ["08:00"]
        assert options.end_times == ["09:00"]
        assert options.serving_times == ["08:00", "08:15", "08:30", "08:45"]

    def test_stale_start_yields_no_end_times(self):
        """A start outside the selected gap does not produce options."""
        state = BookingFormState(
            date="2025-03-03", place_id="room-a", gap_label="08:00 - 09:00", start_time="12:00"
        )

        options = derive_options(state, WINDOW, Weekday.MONDAY, RESERVATIONS, AvailabilityEngine())

        assert options.start_times == ["08:00", "08:30"]
        assert options.end_times == []
        assert options.serving_times == []

    def test_vanished_gap(self):
        """A gap label that no longer exists selects nothing."""
        state = BookingFormState(date="2025-03-03", place_id="room-a", gap_label="09:00 - 10:00")

        options = derive_options(state, WINDOW, Weekday.MONDAY, RESERVATIONS, AvailabilityEngine())

        assert options.selected_gap is None
        assert options.start_times == []
