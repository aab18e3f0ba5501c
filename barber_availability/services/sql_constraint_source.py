import uuid
from datetime import date, time
from typing import Any, List, Optional, Union

import structlog
from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from barber_availability.core.exceptions import AdapterUnavailable
from barber_availability.models.booking import BookingRow
from barber_availability.models.holiday import HolidayRow
from barber_availability.models.lunch_break import LunchBreakRow
from barber_availability.models.opening_hours import OpeningHoursRow
from barber_availability.schemas.availability import (
    BookingStatus,
    DateRange,
    ExistingBooking,
    Holiday,
    LunchBreak,
    OpeningHours,
)

logger = structlog.get_logger(__name__)


def _as_uuid(value: Union[str, uuid.UUID]) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def _format_time(value: Union[time, str, None]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return value


class SQLConstraintSource:
    """Constraint source reading the schedule tables through SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, query: Any, source: str):
        try:
            return await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Constraint query failed", source=source, error=str(e))
            raise AdapterUnavailable(source, str(e)) from e

    async def get_opening_hours(
        self, barber_id: str, day_of_week: int
    ) -> Optional[OpeningHours]:
        query = select(OpeningHoursRow).where(
            and_(
                OpeningHoursRow.barber_id == _as_uuid(barber_id),
                OpeningHoursRow.day_of_week == day_of_week,
            )
        )
        result = await self._execute(query, "opening_hours")
        row = result.scalar_one_or_none()
        if row is None:
            logger.debug(
                "No opening hours row", barber_id=str(barber_id), day_of_week=day_of_week
            )
            return None

        return OpeningHours(
            barber_id=str(row.barber_id),
            day_of_week=row.day_of_week,
            open_time=_format_time(row.open_time),
            close_time=_format_time(row.close_time),
            is_closed=bool(row.is_closed),
        )

    async def get_active_lunch_breaks(self, barber_id: str) -> List[LunchBreak]:
        # NULL is_active rows predate the flag and count as active
        query = select(LunchBreakRow).where(
            and_(
                LunchBreakRow.barber_id == _as_uuid(barber_id),
                LunchBreakRow.is_active.isnot(False),
            )
        )
        result = await self._execute(query, "barber_lunch_breaks")
        return [
            LunchBreak(
                barber_id=str(row.barber_id),
                lunch_break_id=str(row.id),
                start_time=_format_time(row.start_time),
                duration_minutes=row.duration,
                is_active=True,
            )
            for row in result.scalars().all()
        ]

    async def get_holidays(self, barber_id: str, date_range: DateRange) -> List[Holiday]:
        query = select(HolidayRow).where(
            and_(
                HolidayRow.barber_id == _as_uuid(barber_id),
                HolidayRow.start_date <= date_range.end_date,
                HolidayRow.end_date >= date_range.start_date,
            )
        )
        result = await self._execute(query, "barber_holidays")
        return [
            Holiday(
                barber_id=str(row.barber_id),
                start_date=row.start_date,
                end_date=row.end_date,
                reason=row.reason,
            )
            for row in result.scalars().all()
        ]

    async def get_bookings(self, barber_id: str, day: date) -> List[ExistingBooking]:
        query = select(BookingRow).where(
            and_(
                BookingRow.barber_id == _as_uuid(barber_id),
                BookingRow.booking_date == day,
                BookingRow.status != BookingStatus.CANCELLED.value,
            )
        )
        result = await self._execute(query, "bookings")
        bookings = []
        for row in result.scalars().all():
            bookings.append(
                ExistingBooking(
                    barber_id=str(row.barber_id),
                    booking_date=row.booking_date,
                    start_time=_format_time(row.booking_time),
                    service_duration_minutes=row.service.duration if row.service else None,
                    status=row.status,
                )
            )
        logger.debug(
            "Fetched bookings", barber_id=str(barber_id), day=day.isoformat(), count=len(bookings)
        )
        return bookings
