"""Agregador de rotas.

Uso:
    from api.routes import create_api_router

    app = FastAPI()
    app.include_router(create_api_router())
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.health.router import router as health_router
from api.routes.whatsapp.router import router as whatsapp_router


def create_api_router() -> APIRouter:
    """Cria router principal com todos os sub-routers registrados.

    Returns:
        APIRouter configurado com todos os endpoints.
    """
    api_router = APIRouter()

    # Health check na raiz (/health)
    api_router.include_router(health_router, tags=["health"])

    # O endpoint de Flows é montado na raiz: a URL registrada no Flow Builder
    # aponta para o host do serviço
    api_router.include_router(whatsapp_router, tags=["whatsapp"])

    return api_router
