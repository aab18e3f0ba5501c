import os
import sys
from datetime import datetime

import pytest

# Add the project root to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from barber_availability.services.availability_cache import AvailabilityCache
from barber_availability.services.constraint_sources import InMemoryConstraintSource
from barber_availability.services.scheduling import AvailabilityEngineService
from tests.fixtures.schedule_fixtures import CountingSource, weekly_hours


@pytest.fixture
def opening_hours():
    """Monday to Saturday 09:00-17:00, closed on Sunday."""
    return weekly_hours()


@pytest.fixture
def source(opening_hours):
    """In-memory source with opening hours only."""
    return InMemoryConstraintSource(opening_hours=opening_hours)


@pytest.fixture
def counting_source(source):
    return CountingSource(source)


@pytest.fixture
def cache():
    """Fresh cache per test; nothing is shared between tests."""
    return AvailabilityCache()


@pytest.fixture
def engine(counting_source, cache):
    return AvailabilityEngineService(counting_source, cache=cache)


@pytest.fixture
def mock_datetime():
    """Fixed shop-local clock for past-slot checks (Monday 10:30)."""
    return datetime(2024, 1, 15, 10, 30, 0)
