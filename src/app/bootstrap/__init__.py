"""Bootstrap da aplicação: inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas (chave privada, handler do envelope,
client de agenda) aos pontos de uso.

Uso:
    from app.bootstrap import initialize_app, get_flow_endpoint_handler

    # Na inicialização do serviço
    initialize_app()

    # Obter handler (chave carregada uma única vez)
    handler = get_flow_endpoint_handler()
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from app.coordinators.whatsapp.flows import FlowEndpointHandler, create_flow_endpoint_handler
from app.infra.booking import CalComBookingClient
from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_booking_settings,
    get_flow_endpoint_settings,
)

if TYPE_CHECKING:
    from app.protocols.booking_service import BookingServiceProtocol

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa logging JSON com correlation_id.

    Deve ser chamada uma vez no início do serviço.
    """
    settings = get_base_settings()
    configure_logging(
        level=settings.log_level,
        service_name=settings.service_name,
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Inicializa a aplicação para testes (logging em DEBUG)."""
    settings = get_base_settings()
    configure_logging(
        level="DEBUG",
        service_name=f"{settings.service_name}_test",
        correlation_id_getter=get_correlation_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    base_settings = get_base_settings()
    errors: list[str] = []

    errors.extend(f"base: {error}" for error in base_settings.validate())
    errors.extend(f"flow_endpoint: {error}" for error in get_flow_endpoint_settings().validate())
    errors.extend(f"booking: {error}" for error in get_booking_settings().validate_settings())

    if not errors:
        logger.info(
            "settings_validated",
            extra={
                "component": "bootstrap",
                "result": "ok",
                "environment": base_settings.environment,
            },
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": base_settings.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if base_settings.is_strict:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base_settings.environment}:\n{details}")


# ──────────────────────────────────────────────────────────────────────────────
# Getters (lazy initialization com cache)
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_flow_endpoint_handler() -> FlowEndpointHandler:
    """Obtém o handler do envelope criptografado (singleton).

    A chave privada é carregada na primeira chamada e reutilizada em
    todos os requests seguintes.

    Raises:
        KeyLoadError: Se a chave não puder ser carregada
        ValueError: Se a variante configurada for inválida
    """
    return create_flow_endpoint_handler(get_flow_endpoint_settings())


@lru_cache(maxsize=1)
def get_booking_service() -> BookingServiceProtocol:
    """Obtém o client de agenda (singleton)."""
    return CalComBookingClient(get_booking_settings())


def reset_dependencies() -> None:
    """Limpa singletons e settings cacheadas (uso em testes)."""
    get_flow_endpoint_handler.cache_clear()
    get_booking_service.cache_clear()
    get_flow_endpoint_settings.cache_clear()
    get_booking_settings.cache_clear()
    get_base_settings.cache_clear()


__all__ = [
    "get_booking_service",
    "get_flow_endpoint_handler",
    "initialize_app",
    "initialize_test_app",
    "reset_dependencies",
    "validate_runtime_settings",
]
