"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Any, List

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import OperatingWindow, SlotPolicy, Weekday, weekdays_from_flags
from .domain.timeconv import MINUTES_PER_DAY, minutes_to_time, time_to_minutes

DEFAULT_AVAILABLE_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]


def _normalize_clock(value: Any) -> Any:
    """
    Normalise a wall-clock value to ``HH:MM``.

    Unquoted ``17:00`` in YAML 1.1 is read as the sexagesimal integer 1020,
    which happens to be the minutes from midnight, so ints are accepted too.
    """
    if value is None:
        return value
    if isinstance(value, bool):
        raise ValueError(f"Expected a time like '08:00', got {value!r}")
    if isinstance(value, int):
        if not 0 <= value < MINUTES_PER_DAY:
            raise ValueError(f"Time out of range: {value}; quote times in YAML, e.g. '08:00'")
        return minutes_to_time(value)
    if isinstance(value, str):
        return minutes_to_time(time_to_minutes(value))
    raise ValueError(f"Expected a time like '08:00', got {value!r}")


def _validate_days(value: List[str] | None) -> List[str] | None:
    if value is None:
        return value
    try:
        days = weekdays_from_flags(value)
    except ValueError as exc:
        raise ValueError(f"Unknown weekday in {value}") from exc
    return [day.value for day in Weekday if day in days]


class DefaultsConfig(BaseModel):
    """Defaults applied to venues that do not override them."""
    open_time: str = "08:00"
    close_time: str = "17:00"
    slot_duration_minutes: int = 60
    min_duration_minutes: int | None = None
    start_step_minutes: int | None = None
    gap_threshold_minutes: int | None = None
    serving_interval_minutes: int = 15
    available_days: List[str] = Field(default_factory=lambda: list(DEFAULT_AVAILABLE_DAYS))

    @field_validator("open_time", "close_time", mode="before")
    @classmethod
    def validate_clock(cls, value: Any) -> Any:
        """Accept HH:MM or HH:MM:SS and store HH:MM."""
        return _normalize_clock(value)

    @field_validator(
        "slot_duration_minutes",
        "min_duration_minutes",
        "start_step_minutes",
        "gap_threshold_minutes",
        "serving_interval_minutes",
    )
    @classmethod
    def validate_positive(cls, value: int | None) -> int | None:
        """Durations and steps must be positive."""
        if value is not None and value <= 0:
            raise ValueError("durations must be greater than zero")
        return value

    @field_validator("available_days")
    @classmethod
    def validate_days(cls, value: List[str]) -> List[str]:
        """Ensure weekdays are known names, deduplicated, Sunday first."""
        return _validate_days(value)

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the default window opens before it closes."""
        if time_to_minutes(self.close_time) <= time_to_minutes(self.open_time):
            raise ValueError("close_time must be later than open_time")
        return self

    def slot_policy(self) -> SlotPolicy:
        """Slot parameters; unset ones fall back to each venue's slot duration."""
        return SlotPolicy(
            min_duration_minutes=self.min_duration_minutes,
            start_step_minutes=self.start_step_minutes,
            gap_threshold_minutes=self.gap_threshold_minutes,
        )


class VenueConfig(BaseModel):
    """A bookable place, used in mock mode and as a local override."""
    id: str
    name: str
    open_time: str | None = None
    close_time: str | None = None
    slot_duration_minutes: int | None = None
    available_days: List[str] | None = None
    allow_bookings: bool = True
    max_bookings_per_day: int = 10

    @field_validator("open_time", "close_time", mode="before")
    @classmethod
    def validate_clock(cls, value: Any) -> Any:
        return _normalize_clock(value)

    @field_validator("slot_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("slot_duration_minutes must be greater than zero")
        return value

    @field_validator("available_days")
    @classmethod
    def validate_days(cls, value: List[str] | None) -> List[str] | None:
        return _validate_days(value)

    def to_window(self, defaults: DefaultsConfig) -> OperatingWindow:
        """
        Build the venue's operating window, filling gaps from the defaults.

        Raises:
            ValueError: If the resulting window closes before it opens
        """
        open_time = self.open_time or defaults.open_time
        close_time = self.close_time or defaults.close_time
        if time_to_minutes(close_time) <= time_to_minutes(open_time):
            raise ValueError(f"Venue {self.id}: close_time must be later than open_time")

        days = self.available_days if self.available_days is not None else defaults.available_days

        return OperatingWindow(
            open_time=open_time,
            close_time=close_time,
            slot_granularity_minutes=self.slot_duration_minutes or defaults.slot_duration_minutes,
            available_weekdays=weekdays_from_flags(days),
            bookings_enabled=self.allow_bookings,
            max_bookings_per_day=self.max_bookings_per_day,
        )


class ApiConfig(BaseModel):
    """Connection settings for the booking backend."""
    base_url: str = "http://localhost:3000/api"
    token: str | None = None
    timeout_seconds: float = 30
    max_retries: int = 3
    retry_backoff_seconds: float = 1.0

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("max_retries")
    @classmethod
    def validate_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("max_retries must not be negative")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    api: ApiConfig = Field(default_factory=ApiConfig)
    timezone: str = "Europe/Berlin"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    venues: List[VenueConfig] = Field(default_factory=list)

    @field_validator("venues")
    @classmethod
    def validate_venues(cls, value: List[VenueConfig]) -> List[VenueConfig]:
        """Ensure venue ids are unique."""
        seen: set[str] = set()
        for venue in value:
            if venue.id in seen:
                raise ValueError(f"Duplicate venue id detected: {venue.id}")
            seen.add(venue.id)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def slot_policy(self) -> SlotPolicy:
        return self.defaults.slot_policy()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
