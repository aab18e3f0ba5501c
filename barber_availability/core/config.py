from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

MINUTES_PER_DAY = 24 * 60


class Settings(BaseSettings):
    """Engine settings."""

    # Basic settings
    PROJECT_NAME: str = "Barber Availability"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Slot grid
    SLOT_STEP_MINUTES: int = 15
    DEFAULT_BOOKING_DURATION_MINUTES: int = 60

    # Date picker resolution
    RESOLVER_HORIZON_DAYS: int = 30
    RESOLVER_MAX_CONCURRENCY: int = 10

    # Cache
    AVAILABILITY_CACHE_TTL_SECONDS: int = 300

    # Public holidays (ISO country code, e.g. "GB"); None disables them
    PUBLIC_HOLIDAY_COUNTRY: Optional[str] = None

    # Database
    DATABASE_URL: Optional[str] = None

    # Redis
    REDIS_URL: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @field_validator("SLOT_STEP_MINUTES")
    @classmethod
    def validate_slot_step(cls, v: int) -> int:
        if v <= 0 or MINUTES_PER_DAY % v != 0:
            raise ValueError(
                f"SLOT_STEP_MINUTES must be a positive divisor of {MINUTES_PER_DAY}, got {v}"
            )
        return v

    @field_validator(
        "DEFAULT_BOOKING_DURATION_MINUTES",
        "RESOLVER_HORIZON_DAYS",
        "RESOLVER_MAX_CONCURRENCY",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


# Global settings instance
settings = Settings()
