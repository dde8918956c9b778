"""
Conversions between wall-clock strings and minutes from midnight.
"""

from datetime import time
from typing import Union

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(value: Union[str, time]) -> int:
    """
    Convert ``HH:MM`` (or ``HH:MM:SS``) to minutes from midnight.

    Seconds are truncated, matching how the booking backend stores times.

    Raises:
        ValueError: If the value is not a wall-clock time
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Expected HH:MM or HH:MM:SS, got {value!r}")

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError as exc:
        raise ValueError(f"Expected HH:MM or HH:MM:SS, got {value!r}") from exc

    if not 0 <= hours <= 23 or not 0 <= minutes <= 59:
        raise ValueError(f"Time out of range: {value!r}")

    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    """Convert minutes from midnight back to ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_duration(minutes: int) -> str:
    """
    Human readable duration as shown in the gap picker.

    Example: 90 -> "1h 30min", 120 -> "2h", 45 -> "45min"
    """
    hours, mins = divmod(minutes, 60)
    if hours > 0 and mins > 0:
        return f"{hours}h {mins}min"
    if hours > 0:
        return f"{hours}h"
    return f"{mins}min"
