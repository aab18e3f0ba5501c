"""
Read-side seams between the engine and whatever stores barber configuration.

Adapters hand back already-filtered records: inactive lunch breaks and
cancelled bookings never reach the engine.
"""

from collections import defaultdict
from datetime import date
from functools import lru_cache
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

import holidays
import structlog

from barber_availability.core.exceptions import AdapterUnavailable, AvailabilityError
from barber_availability.schemas.availability import (
    DateRange,
    ExistingBooking,
    Holiday,
    LunchBreak,
    OpeningHours,
)

logger = structlog.get_logger(__name__)


@runtime_checkable
class ConstraintSource(Protocol):
    """Async read interface over barber schedule data."""

    async def get_opening_hours(
        self, barber_id: str, day_of_week: int
    ) -> Optional[OpeningHours]: ...

    async def get_active_lunch_breaks(self, barber_id: str) -> List[LunchBreak]: ...

    async def get_holidays(
        self, barber_id: str, date_range: DateRange
    ) -> List[Holiday]: ...

    async def get_bookings(self, barber_id: str, day: date) -> List[ExistingBooking]: ...


async def call_source(source: str, call: Callable[..., Awaitable[Any]], *args: Any) -> Any:
    """Await an adapter call, reporting any adapter failure as ``AdapterUnavailable``.

    Engine errors (bad time strings in stored records and so on) propagate
    unchanged. Cancellation is never wrapped.
    """
    try:
        return await call(*args)
    except AvailabilityError:
        raise
    except Exception as e:
        logger.error("Constraint source failed", source=source, error=str(e))
        raise AdapterUnavailable(source, str(e)) from e


class InMemoryConstraintSource:
    """Constraint source over records held in memory."""

    def __init__(
        self,
        opening_hours: Iterable[OpeningHours] = (),
        lunch_breaks: Iterable[LunchBreak] = (),
        holidays: Iterable[Holiday] = (),
        bookings: Iterable[ExistingBooking] = (),
    ):
        self._opening_hours: Dict[Tuple[str, int], OpeningHours] = {}
        for row in opening_hours:
            self._opening_hours[(row.barber_id, row.day_of_week)] = row

        self._lunch_breaks: Dict[str, List[LunchBreak]] = defaultdict(list)
        for lunch in lunch_breaks:
            self._lunch_breaks[lunch.barber_id].append(lunch)

        self._holidays: Dict[str, List[Holiday]] = defaultdict(list)
        for holiday in holidays:
            self._holidays[holiday.barber_id].append(holiday)

        self._bookings: Dict[Tuple[str, date], List[ExistingBooking]] = defaultdict(list)
        for booking in bookings:
            self._bookings[(booking.barber_id, booking.booking_date)].append(booking)

    async def get_opening_hours(
        self, barber_id: str, day_of_week: int
    ) -> Optional[OpeningHours]:
        return self._opening_hours.get((barber_id, day_of_week))

    async def get_active_lunch_breaks(self, barber_id: str) -> List[LunchBreak]:
        return [lunch for lunch in self._lunch_breaks.get(barber_id, []) if lunch.is_active]

    async def get_holidays(self, barber_id: str, date_range: DateRange) -> List[Holiday]:
        return [
            holiday
            for holiday in self._holidays.get(barber_id, [])
            if holiday.start_date <= date_range.end_date
            and holiday.end_date >= date_range.start_date
        ]

    async def get_bookings(self, barber_id: str, day: date) -> List[ExistingBooking]:
        return [
            booking
            for booking in self._bookings.get((barber_id, day), [])
            if booking.is_active
        ]


@lru_cache(maxsize=32)
def _country_holidays(country: str, year: int, subdiv: Optional[str]) -> holidays.HolidayBase:
    return holidays.country_holidays(country, subdiv=subdiv, years=year)


class PublicHolidayConstraintSource:
    """Adds national public holidays to another source's barber holidays.

    Uses the ``holidays`` library; every public holiday applies to every
    barber as a one-day closure.
    """

    def __init__(self, inner: ConstraintSource, country: str, subdiv: Optional[str] = None):
        self.inner = inner
        self.country = country
        self.subdiv = subdiv

    def public_holidays(self, barber_id: str, date_range: DateRange) -> List[Holiday]:
        result = []
        for year in range(date_range.start_date.year, date_range.end_date.year + 1):
            calendar = _country_holidays(self.country, year, self.subdiv)
            for day, name in sorted(calendar.items()):
                if day in date_range:
                    result.append(
                        Holiday(barber_id=barber_id, start_date=day, end_date=day, reason=name)
                    )
        return result

    async def get_opening_hours(
        self, barber_id: str, day_of_week: int
    ) -> Optional[OpeningHours]:
        return await self.inner.get_opening_hours(barber_id, day_of_week)

    async def get_active_lunch_breaks(self, barber_id: str) -> List[LunchBreak]:
        return await self.inner.get_active_lunch_breaks(barber_id)

    async def get_holidays(self, barber_id: str, date_range: DateRange) -> List[Holiday]:
        own = await self.inner.get_holidays(barber_id, date_range)
        public = self.public_holidays(barber_id, date_range)
        if public:
            logger.debug(
                "Public holidays in range",
                country=self.country,
                count=len(public),
                start=date_range.start_date.isoformat(),
                end=date_range.end_date.isoformat(),
            )
        return own + public

    async def get_bookings(self, barber_id: str, day: date) -> List[ExistingBooking]:
        return await self.inner.get_bookings(barber_id, day)
