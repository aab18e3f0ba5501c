from datetime import date, timedelta
from enum import Enum
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from barber_availability.core.config import settings
from barber_availability.core.exceptions import InvalidServiceDuration
from barber_availability.utils.time_arithmetic import (
    TimeInterval,
    interval_from,
    to_minutes,
)


class BookingStatus(str, Enum):
    UPCOMING = "upcoming"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    NO_SHOW = "no-show"
    CANCELLED = "cancelled"


class ConflictType(str, Enum):
    HOLIDAY = "holiday"
    CLOSED = "closed"
    OUTSIDE_OPENING_HOURS = "outside_opening_hours"
    EXISTING_BOOKING = "existing_booking"
    LUNCH_BREAK = "lunch_break"
    IN_PAST = "in_past"


class UnavailableReason(str, Enum):
    HOLIDAY = "holiday"
    CLOSED = "closed"
    FULLY_BOOKED = "fully_booked"
    PAST_DATE = "past_date"


class OpeningHours(BaseModel):
    """Weekly opening hours row for one barber and weekday (0 = Sunday)."""

    model_config = ConfigDict(frozen=True)

    barber_id: str
    day_of_week: int = Field(ge=0, le=6)
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    is_closed: bool = False

    @model_validator(mode="after")
    def validate_hours(self) -> "OpeningHours":
        # Times on a closed day are ignored
        if self.is_closed:
            return self
        if self.open_time is None or self.close_time is None:
            raise ValueError("open_time and close_time are required when the day is open")
        if to_minutes(self.open_time) >= to_minutes(self.close_time):
            raise ValueError(
                f"open_time {self.open_time} must be before close_time {self.close_time}"
            )
        return self

    @property
    def open_minute(self) -> int:
        return to_minutes(self.open_time)

    @property
    def close_minute(self) -> int:
        return to_minutes(self.close_time)


class LunchBreak(BaseModel):
    model_config = ConfigDict(frozen=True)

    barber_id: str
    lunch_break_id: Optional[str] = None
    start_time: str
    duration_minutes: int = Field(gt=0)
    is_active: bool = True

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        to_minutes(v)
        return v

    @model_validator(mode="after")
    def validate_same_day(self) -> "LunchBreak":
        interval_from(to_minutes(self.start_time), self.duration_minutes)
        return self

    @property
    def interval(self) -> TimeInterval:
        return interval_from(to_minutes(self.start_time), self.duration_minutes)


class Holiday(BaseModel):
    """Inclusive date range during which a barber takes no bookings."""

    model_config = ConfigDict(frozen=True)

    barber_id: str
    start_date: date
    end_date: date
    reason: Optional[str] = None

    @model_validator(mode="after")
    def validate_range(self) -> "Holiday":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class ExistingBooking(BaseModel):
    model_config = ConfigDict(frozen=True)

    barber_id: str
    booking_date: date
    start_time: str
    service_duration_minutes: int = Field(default=None, gt=0, validate_default=True)
    status: BookingStatus = BookingStatus.CONFIRMED

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        to_minutes(v)
        return v

    @field_validator("service_duration_minutes", mode="before")
    @classmethod
    def default_duration(cls, v):
        # Bookings whose service has no duration are assumed to take the default length
        if v is None:
            return settings.DEFAULT_BOOKING_DURATION_MINUTES
        return v

    @model_validator(mode="after")
    def validate_same_day(self) -> "ExistingBooking":
        interval_from(to_minutes(self.start_time), self.service_duration_minutes)
        return self

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    @property
    def interval(self) -> TimeInterval:
        return interval_from(to_minutes(self.start_time), self.service_duration_minutes)


class Service(BaseModel):
    model_config = ConfigDict(frozen=True)

    service_id: Optional[str] = None
    duration_minutes: int

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v: int) -> int:
        if v <= 0:
            raise InvalidServiceDuration(v)
        return v


class DateRange(BaseModel):
    """Inclusive range of calendar days."""

    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date

    @model_validator(mode="after")
    def validate_range(self) -> "DateRange":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @classmethod
    def single(cls, day: date) -> "DateRange":
        return cls(start_date=day, end_date=day)

    @classmethod
    def next_days(cls, start: date, count: int) -> "DateRange":
        """The ``count`` days starting at ``start``."""
        if count <= 0:
            raise ValueError("count must be positive")
        return cls(start_date=start, end_date=start + timedelta(days=count - 1))

    @property
    def num_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def days(self) -> Iterator[date]:
        current = self.start_date
        while current <= self.end_date:
            yield current
            current += timedelta(days=1)

    def __contains__(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class DayAvailability(BaseModel):
    day: date
    is_available: bool
    reason: Optional[UnavailableReason] = None


class SlotValidation(BaseModel):
    start_time: str
    end_time: Optional[str] = None
    is_valid: bool
    conflicts: List[ConflictType] = Field(default_factory=list)
