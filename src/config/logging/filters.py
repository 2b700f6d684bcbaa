"""Filters de logging para injeção de contexto e mascaramento.

Campos injetados:
- correlation_id: ID de rastreamento da requisição
- service: Nome do serviço (ex: flow_endpoint)

Campos mascarados: qualquer `extra` cujo nome indique chave, secret ou
plaintext é substituído por `[REDACTED]` antes da formatação.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

REDACTED = "[REDACTED]"

SENSITIVE_FIELDS = frozenset(
    {
        "aes_key",
        "app_secret",
        "iv",
        "passphrase",
        "plaintext",
        "private_key",
        "private_key_pem",
        "secret",
        "decrypted_body",
    }
)


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Adiciona correlation_id e service ao record.

        Se correlation_id já foi passado via `extra`, preserva o valor.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        return True


class SensitiveDataFilter(logging.Filter):
    """Mascara atributos sensíveis passados via `extra`.

    Não filtra records; apenas sobrescreve os valores.
    """

    def __init__(self, sensitive_fields: Iterable[str] = SENSITIVE_FIELDS) -> None:
        super().__init__()
        self._sensitive_fields = frozenset(sensitive_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for name in self._sensitive_fields:
            if name in record.__dict__:
                setattr(record, name, REDACTED)
        return True
