"""
Clock-time arithmetic on minute offsets.

Every comparison in the engine is reduced to minutes since local midnight.
Strings are only a boundary representation.
"""

from datetime import date
from typing import Any, NamedTuple

from barber_availability.core.exceptions import (
    InvalidTimeFormat,
    OutOfRangeError,
    UnsupportedCrossMidnightInterval,
)

MINUTES_PER_DAY = 24 * 60
LAST_MINUTE = MINUTES_PER_DAY - 1


class TimeInterval(NamedTuple):
    """Half-open ``[start_minute, end_minute)`` interval within one day."""

    start_minute: int
    end_minute: int

    @property
    def duration(self) -> int:
        return self.end_minute - self.start_minute


def to_minutes(value: Any) -> int:
    """Convert ``"HH:MM"`` to minutes since midnight.

    A trailing ``":SS"`` part (SQL ``TIME`` serialisation) is accepted and
    truncated.
    """
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise InvalidTimeFormat(value)
    if not all(part.isascii() and part.isdigit() for part in parts):
        raise InvalidTimeFormat(value)
    if len(parts[0]) not in (1, 2) or any(len(part) != 2 for part in parts[1:]):
        raise InvalidTimeFormat(value)

    hours, minutes = int(parts[0]), int(parts[1])
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(value)
    if len(parts) == 3 and int(parts[2]) > 59:
        raise InvalidTimeFormat(value)

    return hours * 60 + minutes


def to_time_string(minutes: int) -> str:
    """Convert minutes since midnight to zero-padded ``"HH:MM"``."""
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise OutOfRangeError(minutes)
    if not 0 <= minutes <= LAST_MINUTE:
        raise OutOfRangeError(minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def interval_from(start_minute: int, duration: int) -> TimeInterval:
    """Build the interval ``[start, start + duration)``; it may end at midnight but not past it."""
    if not 0 <= start_minute <= LAST_MINUTE:
        raise OutOfRangeError(start_minute)
    if start_minute + duration > MINUTES_PER_DAY:
        raise UnsupportedCrossMidnightInterval(start_minute, duration)
    return TimeInterval(start_minute, start_minute + duration)


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Half-open overlap: intervals that only touch do not overlap."""
    return a.start_minute < b.end_minute and b.start_minute < a.end_minute


def day_of_week(day: date) -> int:
    """Shop weekday index, 0 = Sunday ... 6 = Saturday."""
    return day.isoweekday() % 7
