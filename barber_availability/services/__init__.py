from barber_availability.services.availability_cache import (
    AvailabilityCache,
    AvailabilityCacheKey,
    RedisAvailabilityCache,
    build_cache_key,
    fingerprint,
)
from barber_availability.services.availability_filter import AvailabilityFilter
from barber_availability.services.constraint_sources import (
    ConstraintSource,
    InMemoryConstraintSource,
    PublicHolidayConstraintSource,
)
from barber_availability.services.date_resolver import DateAvailabilityResolver
from barber_availability.services.scheduling import (
    AvailabilityEngineService,
    create_engine_service,
)
from barber_availability.services.slot_generator import SlotGenerator
from barber_availability.services.sql_constraint_source import SQLConstraintSource

__all__ = [
    "AvailabilityCache",
    "AvailabilityCacheKey",
    "AvailabilityEngineService",
    "AvailabilityFilter",
    "ConstraintSource",
    "DateAvailabilityResolver",
    "InMemoryConstraintSource",
    "PublicHolidayConstraintSource",
    "RedisAvailabilityCache",
    "SQLConstraintSource",
    "SlotGenerator",
    "build_cache_key",
    "create_engine_service",
    "fingerprint",
]
