"""
Batch availability for calendar date pickers.

Per date, cheap gates run before the slot pipeline:
  1. past date (when ``today`` or ``now`` is given)
  2. barber holiday
  3. closed weekday
  4. full slot computation, available iff at least one slot survives;
     with ``now``, today's slots at or before it do not count

Holidays are read once per range, opening hours once per distinct weekday
and lunch breaks once per request. Surviving dates are evaluated
concurrently. The answer is all-or-nothing: if any date fails or the caller
cancels, every in-flight evaluation is cancelled and nothing is returned.
"""

import asyncio
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

import structlog

from barber_availability.core.config import settings
from barber_availability.schemas.availability import (
    DateRange,
    DayAvailability,
    LunchBreak,
    OpeningHours,
    UnavailableReason,
)
from barber_availability.services.availability_filter import (
    AvailabilityFilter,
    check_service_duration,
)
from barber_availability.services.constraint_sources import ConstraintSource, call_source
from barber_availability.utils.time_arithmetic import day_of_week

logger = structlog.get_logger(__name__)

DaySlotsFn = Callable[
    [str, date, int, OpeningHours, List[LunchBreak], Optional[str]],
    Awaitable[List[int]],
]


async def gather_all_or_nothing(aws: Iterable[Awaitable[Any]]) -> List[Any]:
    """Run awaitables concurrently; on any failure cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class DateAvailabilityResolver:
    """Decides which days of a range have at least one bookable slot."""

    def __init__(
        self,
        source: ConstraintSource,
        day_slots: DaySlotsFn,
        max_concurrency: Optional[int] = None,
        availability_filter: Optional[AvailabilityFilter] = None,
    ):
        self.source = source
        self.day_slots = day_slots
        self.max_concurrency = max_concurrency or settings.RESOLVER_MAX_CONCURRENCY
        self.availability_filter = availability_filter or AvailabilityFilter()

    async def resolve(
        self,
        barber_id: str,
        date_range: DateRange,
        service_duration: int,
        service_id: Optional[str] = None,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Dict[date, bool]:
        statuses = await self.resolve_days(
            barber_id,
            date_range,
            service_duration,
            service_id=service_id,
            today=today,
            now=now,
        )
        return {day: status.is_available for day, status in statuses.items()}

    async def resolve_days(
        self,
        barber_id: str,
        date_range: DateRange,
        service_duration: int,
        service_id: Optional[str] = None,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Dict[date, DayAvailability]:
        check_service_duration(service_duration)
        if today is None and now is not None:
            today = now.date()
        logger.info(
            "Resolving date availability",
            barber_id=barber_id,
            start=date_range.start_date.isoformat(),
            end=date_range.end_date.isoformat(),
            service_duration=service_duration,
        )

        statuses: Dict[date, DayAvailability] = {}

        holidays = await call_source(
            "holidays", self.source.get_holidays, barber_id, date_range
        )
        pending = []
        for day in date_range.days():
            if today is not None and day < today:
                statuses[day] = _unavailable(day, UnavailableReason.PAST_DATE)
            elif any(holiday.covers(day) for holiday in holidays):
                statuses[day] = _unavailable(day, UnavailableReason.HOLIDAY)
            else:
                pending.append(day)

        weekdays = sorted({day_of_week(day) for day in pending})
        hours = await gather_all_or_nothing(
            call_source("opening_hours", self.source.get_opening_hours, barber_id, weekday)
            for weekday in weekdays
        )
        hours_by_weekday = dict(zip(weekdays, hours))

        open_days = []
        for day in pending:
            opening_hours = hours_by_weekday[day_of_week(day)]
            if opening_hours is None or opening_hours.is_closed:
                statuses[day] = _unavailable(day, UnavailableReason.CLOSED)
            else:
                open_days.append(day)

        if open_days:
            lunch_breaks = await call_source(
                "lunch_breaks", self.source.get_active_lunch_breaks, barber_id
            )
            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def evaluate(day: date) -> DayAvailability:
                async with semaphore:
                    slots = await self.day_slots(
                        barber_id,
                        day,
                        service_duration,
                        hours_by_weekday[day_of_week(day)],
                        lunch_breaks,
                        service_id,
                    )
                if not slots:
                    return _unavailable(day, UnavailableReason.FULLY_BOOKED)
                if not self.availability_filter.exclude_past(slots, day, now):
                    return _unavailable(day, UnavailableReason.PAST_DATE)
                return DayAvailability(day=day, is_available=True)

            for status in await gather_all_or_nothing(evaluate(day) for day in open_days):
                statuses[status.day] = status

        available = sum(1 for status in statuses.values() if status.is_available)
        logger.info(
            "Resolved date availability",
            barber_id=barber_id,
            total_days=date_range.num_days,
            available_days=available,
        )
        return dict(sorted(statuses.items()))


def _unavailable(day: date, reason: UnavailableReason) -> DayAvailability:
    return DayAvailability(day=day, is_available=False, reason=reason)
