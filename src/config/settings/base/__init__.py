"""Agregador de settings base."""

from __future__ import annotations

from config.settings.base.core import (
    STRICT_ENVIRONMENTS,
    BaseSettings,
    Environment,
    get_base_settings,
)

__all__ = [
    "STRICT_ENVIRONMENTS",
    "BaseSettings",
    "Environment",
    "get_base_settings",
]
