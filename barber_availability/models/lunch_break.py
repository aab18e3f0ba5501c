import uuid

from sqlalchemy import Boolean, Column, Index, Integer, Time
from sqlalchemy.dialects.postgresql import UUID

from barber_availability.core.database import Base


class LunchBreakRow(Base):
    __tablename__ = "barber_lunch_breaks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    barber_id = Column(UUID(as_uuid=True), nullable=False)
    start_time = Column(Time, nullable=False)
    duration = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=True, default=True)

    __table_args__ = (Index("ix_barber_lunch_breaks_barber", "barber_id"),)

    def __repr__(self):
        return (
            f"<LunchBreakRow(barber_id={self.barber_id}, start={self.start_time}, "
            f"duration={self.duration}, active={self.is_active})>"
        )
