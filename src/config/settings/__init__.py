"""Agregador de settings do endpoint de Flows.

Re-exporta todas as settings e funções de cada módulo.
"""

from __future__ import annotations

from config.settings.base import (
    STRICT_ENVIRONMENTS,
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.booking import BookingSettings, get_booking_settings
from config.settings.flow_endpoint import FlowEndpointSettings, get_flow_endpoint_settings

__all__ = [
    "STRICT_ENVIRONMENTS",
    "BaseSettings",
    "BookingSettings",
    "Environment",
    "FlowEndpointSettings",
    "get_base_settings",
    "get_booking_settings",
    "get_flow_endpoint_settings",
]
