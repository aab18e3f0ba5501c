from barber_availability.schemas.availability import (
    BookingStatus,
    ConflictType,
    DateRange,
    DayAvailability,
    ExistingBooking,
    Holiday,
    LunchBreak,
    OpeningHours,
    Service,
    SlotValidation,
    UnavailableReason,
)

__all__ = [
    "BookingStatus",
    "ConflictType",
    "DateRange",
    "DayAvailability",
    "ExistingBooking",
    "Holiday",
    "LunchBreak",
    "OpeningHours",
    "Service",
    "SlotValidation",
    "UnavailableReason",
]
