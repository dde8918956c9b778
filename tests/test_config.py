"""
Tests for configuration loading and validation.
"""

import pytest
from pydantic import ValidationError

from venueslots.config import AppConfig, DefaultsConfig, VenueConfig
from venueslots.domain.models import Weekday


class TestDefaultsConfig:
    """Tests for DefaultsConfig."""

    def test_defaults(self):
        defaults = DefaultsConfig()

        assert defaults.open_time == "08:00"
        assert defaults.close_time == "17:00"
        assert defaults.slot_duration_minutes == 60
        assert defaults.serving_interval_minutes == 15

    def test_seconds_are_truncated(self):
        defaults = DefaultsConfig(open_time="07:30:00", close_time="18:00:00")

        assert defaults.open_time == "07:30"
        assert defaults.close_time == "18:00"

    def test_inverted_window_rejected(self):
        with pytest.raises(ValidationError, match="close_time must be later"):
            DefaultsConfig(open_time="17:00", close_time="08:00")

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValidationError):
            DefaultsConfig(slot_duration_minutes=0)

    def test_unknown_weekday_rejected(self):
        with pytest.raises(ValidationError):
            DefaultsConfig(available_days=["monday", "funday"])

    def test_weekdays_deduplicated(self):
        defaults = DefaultsConfig(available_days=["friday", "Monday", "friday"])

        assert defaults.available_days == ["monday", "friday"]

    def test_slot_policy(self):
        policy = DefaultsConfig(start_step_minutes=30).slot_policy()

        assert policy.start_step_minutes == 30
        assert policy.min_duration_minutes is None


class TestVenueConfig:
    """Tests for VenueConfig."""

    def test_to_window_uses_defaults(self):
        venue = VenueConfig(id="room-a", name="Room A")

        window = venue.to_window(DefaultsConfig())

        assert window.operating_hours() == "08:00 - 17:00"
        assert window.slot_granularity_minutes == 60
        assert Weekday.MONDAY in window.available_weekdays
        assert Weekday.SUNDAY not in window.available_weekdays

    def test_to_window_overrides(self):
        venue = VenueConfig(
            id="hall",
            name="Hall",
            open_time="10:00",
            slot_duration_minutes=90,
            available_days=["saturday"],
            allow_bookings=False,
        )

        window = venue.to_window(DefaultsConfig())

        assert window.open_time == "10:00"
        assert window.slot_granularity_minutes == 90
        assert window.available_weekdays == frozenset({Weekday.SATURDAY})
        assert not window.bookings_enabled

    def test_to_window_rejects_inverted_hours(self):
        venue = VenueConfig(id="late", name="Late", open_time="18:00")

        with pytest.raises(ValueError, match="close_time must be later"):
            venue.to_window(DefaultsConfig())


class TestAppConfig:
    """Tests for loading the YAML config."""

    def test_load_from_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "api:\n"
            "  base_url: https://bookings.example.com/api/\n"
            "defaults:\n"
            "  open_time: '07:00'\n"
            "  close_time: 19:00\n"
            "venues:\n"
            "  - id: room-a\n"
            "    name: Room A\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_file)

        assert config.api.base_url == "https://bookings.example.com/api"
        # Unquoted 19:00 is a YAML 1.1 sexagesimal int
        assert config.defaults.close_time == "19:00"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("venues: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(config_file)

    def test_non_mapping_root(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_file)

    def test_duplicate_venue_ids(self):
        with pytest.raises(ValidationError, match="Duplicate venue id"):
            AppConfig(venues=[{"id": "a", "name": "A"}, {"id": "a", "name": "B"}])
