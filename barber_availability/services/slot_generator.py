from typing import List, Optional

from barber_availability.core.config import settings
from barber_availability.schemas.availability import OpeningHours


class SlotGenerator:
    """Builds the raw grid of candidate start minutes from opening hours.

    The grid step is a shop-wide constant and does not depend on any service
    duration; fitting a service before closing is the filter's job.
    """

    def __init__(self, step_minutes: Optional[int] = None):
        self.step_minutes = settings.SLOT_STEP_MINUTES if step_minutes is None else step_minutes
        if self.step_minutes <= 0:
            raise ValueError(f"step_minutes must be positive, got {self.step_minutes}")

    def generate(
        self, opening_hours: Optional[OpeningHours], step_minutes: Optional[int] = None
    ) -> List[int]:
        """Return ``open, open + step, ...`` strictly before closing time."""
        step = self.step_minutes if step_minutes is None else step_minutes
        if step <= 0:
            raise ValueError(f"step_minutes must be positive, got {step}")

        if opening_hours is None or opening_hours.is_closed:
            return []

        close_minute = opening_hours.close_minute
        return list(range(opening_hours.open_minute, close_minute, step))
