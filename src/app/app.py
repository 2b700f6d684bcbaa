"""Entrypoint do endpoint de data exchange de WhatsApp Flows.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from api.routes import create_api_router
from app.bootstrap import get_flow_endpoint_handler, initialize_app, validate_runtime_settings
from config.logging import get_logger
from config.settings import get_base_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)

DEFAULT_PORT = 8080


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações
    - Em staging/produção carrega a chave privada de imediato; falha de
      carga impede o boot
    """
    settings = get_base_settings()
    logger.info("app_starting", extra={"service": settings.service_name})
    validate_runtime_settings()
    if settings.is_strict:
        handler = get_flow_endpoint_handler()
        logger.info(
            "flow_private_key_ready",
            extra={"service": settings.service_name, "variant": handler.variant.name},
        )

    yield

    logger.info("app_shutting_down", extra={"service": settings.service_name})


def create_app() -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Returns:
        Aplicação FastAPI configurada.
    """
    settings = get_base_settings()
    fastapi_app = FastAPI(
        title="Flow Endpoint",
        description="Endpoint de data exchange criptografado para WhatsApp Flows",
        version="1.0.0",
        lifespan=lifespan,
        # Docs desabilitadas em produção
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None,
        openapi_url=None if settings.is_production else "/openapi.json",
    )

    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"service": settings.service_name})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta."""
    import uvicorn

    port = int(os.getenv("PORT", str(DEFAULT_PORT)))
    logger.info("Starting flow endpoint", extra={"port": port})
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=port,
        reload=get_base_settings().debug,
    )


if __name__ == "__main__":
    main()
