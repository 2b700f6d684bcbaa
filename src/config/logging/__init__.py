"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização (bootstrap)
    configure_logging(level="INFO", service_name="flow_endpoint")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("flow_request_decrypted", extra={"variant": "gcm_appended"})

Campos obrigatórios em todo log:
- correlation_id
- service
- level
- logger
- message
- asctime

Chaves, IVs, secrets e plaintext nunca são logados; use `fingerprint()`
quando precisar correlacionar valores.
"""

from config.logging.config import configure_logging, fingerprint, get_logger, log_fallback
from config.logging.filters import REDACTED, SENSITIVE_FIELDS, CorrelationIdFilter, SensitiveDataFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REDACTED",
    "REQUIRED_LOG_FIELDS",
    "SENSITIVE_FIELDS",
    "CorrelationIdFilter",
    "SensitiveDataFilter",
    "configure_logging",
    "create_json_formatter",
    "fingerprint",
    "get_logger",
    "log_fallback",
]
