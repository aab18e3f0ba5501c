"""Test batch date resolution for the booking calendar."""

import asyncio
from datetime import date, datetime

import pytest

from barber_availability.core.exceptions import AdapterUnavailable, InvalidServiceDuration
from barber_availability.schemas.availability import DateRange, UnavailableReason
from barber_availability.services.constraint_sources import InMemoryConstraintSource
from barber_availability.services.date_resolver import (
    DateAvailabilityResolver,
    gather_all_or_nothing,
)
from barber_availability.services.scheduling import AvailabilityEngineService
from tests.fixtures.schedule_fixtures import (
    BARBER_ID,
    MONDAY,
    SUNDAY,
    TUESDAY,
    BlockingBookingsSource,
    CountingSource,
    FailingBookingsSource,
    booking,
    holiday,
    lunch,
    weekly_hours,
)

WEDNESDAY = date(2024, 1, 17)
THURSDAY = date(2024, 1, 18)
SATURDAY = date(2024, 1, 20)
WEEK = DateRange(start_date=SUNDAY, end_date=SATURDAY)


@pytest.fixture
def week_source():
    """Holiday on Wednesday and a fully booked Thursday."""
    return CountingSource(
        InMemoryConstraintSource(
            opening_hours=weekly_hours(),
            lunch_breaks=[lunch()],
            holidays=[holiday(WEDNESDAY)],
            bookings=[booking("09:00", 480, day=THURSDAY)],
        )
    )


@pytest.mark.unit
class TestDateAvailabilityResolver:
    """Test per-day gates and reasons."""

    @pytest.mark.asyncio
    async def test_week_statuses(self, week_source):
        engine = AvailabilityEngineService(week_source)

        statuses = await engine.resolve_day_statuses(BARBER_ID, WEEK, 30, today=MONDAY)

        assert list(statuses) == list(WEEK.days())
        assert statuses[SUNDAY].reason == UnavailableReason.PAST_DATE
        assert statuses[MONDAY].is_available
        assert statuses[TUESDAY].is_available
        assert statuses[WEDNESDAY].reason == UnavailableReason.HOLIDAY
        assert statuses[THURSDAY].reason == UnavailableReason.FULLY_BOOKED
        assert statuses[SATURDAY].is_available
        assert all(s.reason is None for s in statuses.values() if s.is_available)

    @pytest.mark.asyncio
    async def test_closed_weekday(self, week_source):
        engine = AvailabilityEngineService(week_source)

        result = await engine.resolve_availability_for_range(BARBER_ID, WEEK, 30)

        assert result[SUNDAY] is False
        statuses = await engine.resolve_day_statuses(BARBER_ID, WEEK, 30)
        assert statuses[SUNDAY].reason == UnavailableReason.CLOSED

    @pytest.mark.asyncio
    async def test_adapter_calls_are_batched(self, week_source):
        """Test holidays are read once and opening hours once per weekday."""
        engine = AvailabilityEngineService(week_source)
        two_weeks = DateRange.next_days(MONDAY, 14)

        await engine.resolve_availability_for_range(BARBER_ID, two_weeks, 30)

        assert week_source.calls["holidays"] == 1
        assert week_source.calls["opening_hours"] == 7
        assert week_source.calls["lunch_breaks"] == 1
        # Wednesday 17th is a holiday, the two Sundays are closed
        assert week_source.calls["bookings"] == 11

    @pytest.mark.asyncio
    async def test_idempotent(self, week_source):
        engine = AvailabilityEngineService(week_source)

        first = await engine.resolve_availability_for_range(BARBER_ID, WEEK, 45, today=MONDAY)
        second = await engine.resolve_availability_for_range(BARBER_ID, WEEK, 45, today=MONDAY)

        assert first == second

    @pytest.mark.asyncio
    async def test_service_too_long_for_any_day(self, week_source):
        engine = AvailabilityEngineService(week_source)

        result = await engine.resolve_availability_for_range(BARBER_ID, WEEK, 600)

        assert not any(result.values())

    @pytest.mark.asyncio
    async def test_invalid_duration_fails_before_reads(self, week_source):
        engine = AvailabilityEngineService(week_source)

        with pytest.raises(InvalidServiceDuration):
            await engine.resolve_availability_for_range(BARBER_ID, WEEK, 0)

        assert sum(week_source.calls.values()) == 0

    @pytest.mark.asyncio
    async def test_adapter_failure_fails_whole_range(self, source):
        """Test one failing day yields an error instead of a partial answer."""
        failing = FailingBookingsSource(source, ConnectionError("database is down"))
        engine = AvailabilityEngineService(failing)

        with pytest.raises(AdapterUnavailable) as exc_info:
            await engine.resolve_availability_for_range(BARBER_ID, WEEK, 30)

        assert exc_info.value.source == "bookings"

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self, source):
        active = 0
        peak = 0

        async def day_slots(barber_id, day, duration, hours, lunch_breaks, service_id):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return [540]

        resolver = DateAvailabilityResolver(source, day_slots, max_concurrency=2)

        result = await resolver.resolve(BARBER_ID, DateRange.next_days(MONDAY, 12), 30)

        assert peak == 2
        assert len(result) == 12

    @pytest.mark.asyncio
    async def test_failure_cancels_in_flight_days(self, source):
        started = []
        cancelled = []

        async def day_slots(barber_id, day, duration, hours, lunch_breaks, service_id):
            started.append(day)
            if day == TUESDAY:
                await asyncio.sleep(0)
                raise AdapterUnavailable("bookings", "timeout")
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(day)
                raise
            return []

        resolver = DateAvailabilityResolver(source, day_slots)

        with pytest.raises(AdapterUnavailable):
            await resolver.resolve(BARBER_ID, WEEK, 30)

        assert TUESDAY in started
        assert set(cancelled) == set(started) - {TUESDAY}

    @pytest.mark.asyncio
    async def test_caller_cancellation_propagates(self, source):
        """Test cancelling the request cancels every day still being evaluated."""
        blocking = BlockingBookingsSource(source)
        engine = AvailabilityEngineService(blocking)

        task = asyncio.ensure_future(engine.resolve_availability_for_range(BARBER_ID, WEEK, 30))
        await blocking.started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert blocking.cancelled == blocking.calls["bookings"]
        assert blocking.cancelled >= 1

    @pytest.mark.asyncio
    async def test_today_after_last_slot(self, week_source):
        """Test today is past once every remaining start time has gone."""
        engine = AvailabilityEngineService(week_source)
        evening = datetime(2024, 1, 15, 16, 45)

        statuses = await engine.resolve_day_statuses(BARBER_ID, WEEK, 30, now=evening)

        assert statuses[SUNDAY].reason == UnavailableReason.PAST_DATE
        assert statuses[MONDAY].reason == UnavailableReason.PAST_DATE
        assert statuses[TUESDAY].is_available

    @pytest.mark.asyncio
    async def test_today_with_slots_left(self, week_source, mock_datetime):
        engine = AvailabilityEngineService(week_source)

        result = await engine.resolve_availability_for_range(
            BARBER_ID, WEEK, 30, now=mock_datetime
        )

        assert result[MONDAY] is True
        assert result[SUNDAY] is False


@pytest.mark.unit
class TestGatherAllOrNothing:
    """Test the all-or-nothing gather helper."""

    @pytest.mark.asyncio
    async def test_results_in_order(self):
        async def value(v):
            await asyncio.sleep(0.001 * (3 - v))
            return v

        assert await gather_all_or_nothing(value(v) for v in range(3)) == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await gather_all_or_nothing([]) == []
