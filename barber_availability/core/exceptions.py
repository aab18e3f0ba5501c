"""
Domain exceptions for the availability engine.

Contract violations (bad time strings, bad durations, out-of-range minutes)
fail fast and must never be turned into an empty availability answer.
``AdapterUnavailable`` is the one recoverable error: the caller may retry.

None of these derive from ``ValueError`` so they pass through pydantic
validators without being wrapped in a ``ValidationError``.
"""

from typing import Any, Dict, Optional


class AvailabilityError(Exception):
    """Base exception for all availability engine errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class InvalidTimeFormat(AvailabilityError):
    """Raised when a clock-time string is not a valid "HH:MM" value."""

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Invalid time format: {value!r}, expected 'HH:MM'",
            details={"value": value},
        )


class OutOfRangeError(AvailabilityError):
    """Raised when a minute offset falls outside a single day."""

    def __init__(self, minutes: int) -> None:
        super().__init__(
            f"Minute offset {minutes} is outside the range 0..1439",
            details={"minutes": minutes},
        )


class InvalidServiceDuration(AvailabilityError):
    """Raised when a service duration is zero or negative."""

    def __init__(self, duration: Any) -> None:
        super().__init__(
            f"Service duration must be a positive number of minutes, got {duration!r}",
            details={"duration": duration},
        )


class UnsupportedCrossMidnightInterval(AvailabilityError):
    """Raised when an interval would end after midnight."""

    def __init__(self, start_minute: int, duration: int) -> None:
        super().__init__(
            f"Interval starting at minute {start_minute} with duration "
            f"{duration} crosses midnight",
            details={"start_minute": start_minute, "duration": duration},
        )


class AdapterUnavailable(AvailabilityError):
    """Raised when a constraint source fails to answer."""

    def __init__(self, source: str, reason: Optional[str] = None) -> None:
        self.source = source
        message = f"Constraint source '{source}' is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, details={"source": source, "reason": reason})
