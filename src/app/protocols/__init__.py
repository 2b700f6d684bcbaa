"""Protocolos e contratos do core da aplicação."""

from .booking_service import BookingServiceProtocol

__all__ = ["BookingServiceProtocol"]
