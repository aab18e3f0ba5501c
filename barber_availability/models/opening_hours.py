import uuid

from sqlalchemy import Boolean, Column, Index, Integer, Time
from sqlalchemy.dialects.postgresql import UUID

from barber_availability.core.database import Base


class OpeningHoursRow(Base):
    """Weekly opening hours, one row per barber per weekday (0 = Sunday)."""

    __tablename__ = "opening_hours"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    barber_id = Column(UUID(as_uuid=True), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    open_time = Column(Time, nullable=True)
    close_time = Column(Time, nullable=True)
    is_closed = Column(Boolean, nullable=True, default=False)

    __table_args__ = (
        Index("ix_opening_hours_barber_day", "barber_id", "day_of_week"),
    )

    def __repr__(self):
        state = "closed" if self.is_closed else f"{self.open_time}-{self.close_time}"
        return (
            f"<OpeningHoursRow(barber_id={self.barber_id}, "
            f"day_of_week={self.day_of_week}, {state})>"
        )
