"""Testes do endpoint de health."""

from __future__ import annotations

from datetime import datetime

import pytest

from api.routes.health.router import health_check


@pytest.mark.asyncio
async def test_health_returns_healthy() -> None:
    response = await health_check()

    assert response.status == "healthy"
    assert response.service
    assert response.version == "1.0.0"
    assert datetime.fromisoformat(response.timestamp).tzinfo is not None
