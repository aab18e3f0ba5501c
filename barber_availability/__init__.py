"""Availability and scheduling engine for barbershop bookings."""

__version__ = "1.0.0"
