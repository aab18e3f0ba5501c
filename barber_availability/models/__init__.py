from barber_availability.core.database import Base
from barber_availability.models.booking import BookingRow, ServiceRow
from barber_availability.models.holiday import HolidayRow
from barber_availability.models.lunch_break import LunchBreakRow
from barber_availability.models.opening_hours import OpeningHoursRow

__all__ = [
    "Base",
    "BookingRow",
    "HolidayRow",
    "LunchBreakRow",
    "OpeningHoursRow",
    "ServiceRow",
]
