from datetime import date, datetime, time
from typing import List, Optional, Sequence

import structlog

from barber_availability.core.exceptions import InvalidServiceDuration
from barber_availability.schemas.availability import (
    ConflictType,
    ExistingBooking,
    LunchBreak,
)
from barber_availability.utils.time_arithmetic import TimeInterval, overlaps

logger = structlog.get_logger(__name__)


def check_service_duration(service_duration) -> int:
    """Reject zero, negative and non-integer durations."""
    if isinstance(service_duration, bool) or not isinstance(service_duration, int):
        raise InvalidServiceDuration(service_duration)
    if service_duration <= 0:
        raise InvalidServiceDuration(service_duration)
    return service_duration


class AvailabilityFilter:
    """Removes candidate start times that cannot host a service.

    Rules run per candidate in a fixed order: fit before closing, then
    booking conflicts, then lunch-break conflicts. Holidays are a day-level
    gate applied by the caller before any candidate is generated.
    """

    def filter(
        self,
        candidates: Sequence[int],
        service_duration: int,
        close_minute: int,
        bookings: Sequence[ExistingBooking] = (),
        lunch_breaks: Sequence[LunchBreak] = (),
    ) -> List[int]:
        check_service_duration(service_duration)
        booking_intervals = [booking.interval for booking in bookings]
        lunch_intervals = [lunch.interval for lunch in lunch_breaks]

        available = []
        rejected_close = rejected_booking = rejected_lunch = 0
        for candidate in candidates:
            slot = TimeInterval(candidate, candidate + service_duration)

            if slot.end_minute > close_minute:
                rejected_close += 1
                continue
            if any(overlaps(slot, busy) for busy in booking_intervals):
                rejected_booking += 1
                continue
            if any(overlaps(slot, lunch) for lunch in lunch_intervals):
                rejected_lunch += 1
                continue

            available.append(candidate)

        logger.debug(
            "Filtered candidate slots",
            candidates=len(candidates),
            available=len(available),
            rejected_close=rejected_close,
            rejected_booking=rejected_booking,
            rejected_lunch=rejected_lunch,
        )
        return available

    def conflicts_for(
        self,
        start_minute: int,
        service_duration: int,
        open_minute: int,
        close_minute: int,
        bookings: Sequence[ExistingBooking] = (),
        lunch_breaks: Sequence[LunchBreak] = (),
    ) -> List[ConflictType]:
        """Every rule a proposed start time breaks, in rule order."""
        check_service_duration(service_duration)
        slot = TimeInterval(start_minute, start_minute + service_duration)
        conflicts = []

        if slot.start_minute < open_minute or slot.end_minute > close_minute:
            conflicts.append(ConflictType.OUTSIDE_OPENING_HOURS)
        if any(overlaps(slot, booking.interval) for booking in bookings):
            conflicts.append(ConflictType.EXISTING_BOOKING)
        if any(overlaps(slot, lunch.interval) for lunch in lunch_breaks):
            conflicts.append(ConflictType.LUNCH_BREAK)

        return conflicts

    @staticmethod
    def is_past(start_minute: int, day: date, now: Optional[datetime]) -> bool:
        """True when the slot start is at or before ``now`` on the shop clock."""
        if now is None:
            return False
        slot_start = datetime.combine(day, time(start_minute // 60, start_minute % 60))
        return slot_start <= now.replace(tzinfo=None)

    def exclude_past(
        self, slots: Sequence[int], day: date, now: Optional[datetime]
    ) -> List[int]:
        if now is None:
            return list(slots)
        return [slot for slot in slots if not self.is_past(slot, day, now)]
