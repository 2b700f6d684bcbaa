"""Clients concretos de agenda."""

from app.infra.booking.cal_com_client import STATIC_TIME_OPTIONS, CalComBookingClient

__all__ = ["STATIC_TIME_OPTIONS", "CalComBookingClient"]
