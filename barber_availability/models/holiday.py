import uuid

from sqlalchemy import Column, Date, DateTime, Index, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from barber_availability.core.database import Base


class HolidayRow(Base):
    """Barber holiday; both dates are inclusive."""

    __tablename__ = "barber_holidays"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    barber_id = Column(UUID(as_uuid=True), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_barber_holidays_barber_dates", "barber_id", "start_date", "end_date"),
    )

    def __repr__(self):
        return (
            f"<HolidayRow(barber_id={self.barber_id}, "
            f"{self.start_date} - {self.end_date})>"
        )
