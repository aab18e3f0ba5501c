import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from barber_availability.core.database import Base


class ServiceRow(Base):
    __tablename__ = "services"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    duration = Column(Integer, nullable=True)

    def __repr__(self):
        return f"<ServiceRow(id={self.id}, name='{self.name}', duration={self.duration})>"


class BookingRow(Base):
    """Booking as stored by the booking workflow; read-only here."""

    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    barber_id = Column(UUID(as_uuid=True), nullable=False)
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id"), nullable=False)
    booking_date = Column(Date, nullable=False)
    booking_time = Column(Time, nullable=False)
    status = Column(String(20), nullable=False, default="confirmed")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    service = relationship("ServiceRow", lazy="joined")

    __table_args__ = (
        Index("ix_bookings_barber_date", "barber_id", "booking_date"),
        Index("ix_bookings_status", "status"),
    )

    def __repr__(self):
        return (
            f"<BookingRow(barber_id={self.barber_id}, "
            f"{self.booking_date} {self.booking_time}, status={self.status})>"
        )
