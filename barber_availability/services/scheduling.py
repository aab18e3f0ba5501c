from datetime import date, datetime
from typing import Dict, List, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from barber_availability.core.config import settings
from barber_availability.schemas.availability import (
    ConflictType,
    DateRange,
    DayAvailability,
    LunchBreak,
    OpeningHours,
    SlotValidation,
)
from barber_availability.services.availability_cache import (
    AvailabilityCache,
    BaseAvailabilityCache,
    RedisAvailabilityCache,
    build_cache_key,
)
from barber_availability.services.availability_filter import (
    AvailabilityFilter,
    check_service_duration,
)
from barber_availability.services.constraint_sources import (
    ConstraintSource,
    PublicHolidayConstraintSource,
    call_source,
)
from barber_availability.services.date_resolver import DateAvailabilityResolver
from barber_availability.services.slot_generator import SlotGenerator
from barber_availability.services.sql_constraint_source import SQLConstraintSource
from barber_availability.utils.time_arithmetic import (
    LAST_MINUTE,
    day_of_week,
    to_minutes,
    to_time_string,
)

logger = structlog.get_logger(__name__)


class AvailabilityEngineService:
    """Availability and scheduling engine for barber bookings.

    Reads constraints through a ``ConstraintSource`` and never writes. The
    optional cache is injected so its lifetime belongs to the caller.
    """

    def __init__(
        self,
        source: ConstraintSource,
        cache: Optional[BaseAvailabilityCache] = None,
        slot_generator: Optional[SlotGenerator] = None,
        availability_filter: Optional[AvailabilityFilter] = None,
        max_concurrency: Optional[int] = None,
    ):
        self.source = source
        self.cache = cache
        self.slot_generator = slot_generator or SlotGenerator()
        self.availability_filter = availability_filter or AvailabilityFilter()
        self.resolver = DateAvailabilityResolver(
            source,
            self._day_slots,
            max_concurrency=max_concurrency,
            availability_filter=self.availability_filter,
        )

    async def compute_available_slots(
        self,
        barber_id: str,
        day: date,
        service_duration: int,
        service_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[str]:
        """
        Get the bookable start times for a barber on a day.

        Args:
            barber_id: Barber to check
            day: Calendar day on the shop clock
            service_duration: Minutes the service needs
            service_id: Optional service identifier, part of the cache key
            now: When given, start times at or before it are dropped

        Returns:
            Ordered "HH:MM" strings, empty when nothing can be booked
        """
        check_service_duration(service_duration)
        logger.info(
            "Computing available slots",
            barber_id=barber_id,
            day=day.isoformat(),
            service_duration=service_duration,
        )

        if await self._is_holiday(barber_id, day):
            logger.info("Barber is on holiday", barber_id=barber_id, day=day.isoformat())
            return []

        opening_hours = await call_source(
            "opening_hours", self.source.get_opening_hours, barber_id, day_of_week(day)
        )
        if opening_hours is None or opening_hours.is_closed:
            logger.info("Barber is closed", barber_id=barber_id, day=day.isoformat())
            return []

        lunch_breaks = await call_source(
            "lunch_breaks", self.source.get_active_lunch_breaks, barber_id
        )
        slots = await self._day_slots(
            barber_id, day, service_duration, opening_hours, lunch_breaks, service_id
        )
        slots = self.availability_filter.exclude_past(slots, day, now)

        logger.info(
            "Available slots computed",
            barber_id=barber_id,
            day=day.isoformat(),
            available=len(slots),
        )
        return [to_time_string(minute) for minute in slots]

    async def is_date_available(
        self,
        barber_id: str,
        day: date,
        service_duration: int,
        service_id: Optional[str] = None,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        statuses = await self.resolver.resolve_days(
            barber_id,
            DateRange.single(day),
            service_duration,
            service_id=service_id,
            today=today,
            now=now,
        )
        return statuses[day].is_available

    async def resolve_availability_for_range(
        self,
        barber_id: str,
        date_range: DateRange,
        service_duration: int,
        service_id: Optional[str] = None,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Dict[date, bool]:
        return await self.resolver.resolve(
            barber_id,
            date_range,
            service_duration,
            service_id=service_id,
            today=today,
            now=now,
        )

    async def resolve_day_statuses(
        self,
        barber_id: str,
        date_range: DateRange,
        service_duration: int,
        service_id: Optional[str] = None,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Dict[date, DayAvailability]:
        """Like ``resolve_availability_for_range`` but says why a day is unavailable."""
        return await self.resolver.resolve_days(
            barber_id,
            date_range,
            service_duration,
            service_id=service_id,
            today=today,
            now=now,
        )

    async def resolve_horizon(
        self,
        barber_id: str,
        today: date,
        service_duration: int,
        service_id: Optional[str] = None,
        days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Dict[date, bool]:
        """Availability for the date picker window starting today."""
        date_range = DateRange.next_days(today, days or settings.RESOLVER_HORIZON_DAYS)
        return await self.resolve_availability_for_range(
            barber_id,
            date_range,
            service_duration,
            service_id=service_id,
            today=today,
            now=now,
        )

    async def validate_start_time(
        self,
        barber_id: str,
        day: date,
        start_time: str,
        service_duration: int,
        now: Optional[datetime] = None,
    ) -> SlotValidation:
        """Check a proposed start time against every rule and report all conflicts."""
        start_minute = to_minutes(start_time)
        check_service_duration(service_duration)
        end_minute = start_minute + service_duration
        end_time = to_time_string(end_minute) if end_minute <= LAST_MINUTE else None

        if await self._is_holiday(barber_id, day):
            return SlotValidation(
                start_time=start_time,
                end_time=end_time,
                is_valid=False,
                conflicts=[ConflictType.HOLIDAY],
            )

        opening_hours = await call_source(
            "opening_hours", self.source.get_opening_hours, barber_id, day_of_week(day)
        )
        if opening_hours is None or opening_hours.is_closed:
            return SlotValidation(
                start_time=start_time,
                end_time=end_time,
                is_valid=False,
                conflicts=[ConflictType.CLOSED],
            )

        lunch_breaks = await call_source(
            "lunch_breaks", self.source.get_active_lunch_breaks, barber_id
        )
        bookings = await call_source("bookings", self.source.get_bookings, barber_id, day)

        conflicts = self.availability_filter.conflicts_for(
            start_minute,
            service_duration,
            opening_hours.open_minute,
            opening_hours.close_minute,
            bookings,
            lunch_breaks,
        )
        if self.availability_filter.is_past(start_minute, day, now):
            conflicts.append(ConflictType.IN_PAST)

        if conflicts:
            logger.info(
                "Start time rejected",
                barber_id=barber_id,
                day=day.isoformat(),
                start_time=start_time,
                conflicts=[c.value for c in conflicts],
            )

        return SlotValidation(
            start_time=start_time,
            end_time=end_time,
            is_valid=not conflicts,
            conflicts=conflicts,
        )

    async def invalidate_cache(
        self, barber_id: Optional[str] = None, day: Optional[date] = None
    ) -> int:
        """Drop cached slots; everything when no barber is given."""
        if self.cache is None:
            return 0
        if barber_id is None:
            return await self.cache.invalidate()
        if day is None:
            return await self.cache.invalidate_barber(barber_id)
        return await self.cache.invalidate_date(barber_id, day)

    async def _is_holiday(self, barber_id: str, day: date) -> bool:
        holidays = await call_source(
            "holidays", self.source.get_holidays, barber_id, DateRange.single(day)
        )
        return any(holiday.covers(day) for holiday in holidays)

    async def _day_slots(
        self,
        barber_id: str,
        day: date,
        service_duration: int,
        opening_hours: OpeningHours,
        lunch_breaks: List[LunchBreak],
        service_id: Optional[str] = None,
    ) -> List[int]:
        """Slot pipeline for an open, non-holiday day, memoized when a cache is set."""
        key = None
        if self.cache is not None:
            key = build_cache_key(barber_id, day, service_duration, lunch_breaks, service_id)
            cached = await self.cache.get(key)
            if cached is not None:
                logger.debug("Availability cache hit", barber_id=barber_id, day=day.isoformat())
                return cached

        bookings = await call_source("bookings", self.source.get_bookings, barber_id, day)
        candidates = self.slot_generator.generate(opening_hours)
        slots = self.availability_filter.filter(
            candidates,
            service_duration,
            opening_hours.close_minute,
            bookings,
            lunch_breaks,
        )

        if key is not None:
            await self.cache.put(key, slots)
        return slots


def create_engine_service(
    db: AsyncSession, cache: Optional[BaseAvailabilityCache] = None
) -> AvailabilityEngineService:
    """Wire the engine over the SQL tables using the configured settings.

    Without an explicit cache a Redis cache is used when ``REDIS_URL`` is set,
    otherwise a fresh in-process cache.
    """
    source: ConstraintSource = SQLConstraintSource(db)
    if settings.PUBLIC_HOLIDAY_COUNTRY:
        source = PublicHolidayConstraintSource(source, settings.PUBLIC_HOLIDAY_COUNTRY)

    if cache is None:
        cache = RedisAvailabilityCache() if settings.REDIS_URL else AvailabilityCache()

    return AvailabilityEngineService(source, cache=cache)
