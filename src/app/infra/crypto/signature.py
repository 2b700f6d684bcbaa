"""Validação de assinatura HMAC-SHA256 para webhooks."""

from __future__ import annotations

import hashlib
import hmac
import logging

from .constants import SIGNATURE_PREFIX
from .errors import SignatureConfigurationError

logger = logging.getLogger(__name__)


def validate_flow_signature(
    payload: bytes,
    signature: str | None,
    secret: bytes | None,
    *,
    required: bool = False,
) -> bool:
    """Valida assinatura HMAC-SHA256 do Meta.

    O HMAC é calculado sobre os bytes brutos do corpo, nunca sobre o JSON
    re-serializado.

    Args:
        payload: Corpo bruto da requisição
        signature: Header X-Hub-Signature-256 (`sha256=<hex>`)
        secret: Secret do app em bytes; vazio desativa a validação
        required: Exige secret configurado

    Returns:
        True se assinatura válida (ou validação desativada)

    Raises:
        SignatureConfigurationError: Se `required` e nenhum secret configurado
    """
    if not secret:
        if required:
            raise SignatureConfigurationError("Signature validation required but no secret configured")
        logger.warning(
            "flow_signature_validation_skipped",
            extra={"component": "flow_signature", "reason": "app_secret_not_configured"},
        )
        return True

    if not signature or not signature.startswith(SIGNATURE_PREFIX):
        return False

    try:
        presented = bytes.fromhex(signature[len(SIGNATURE_PREFIX) :])
    except ValueError:
        return False

    computed = hmac.new(secret, payload, hashlib.sha256).digest()
    if len(presented) != len(computed):
        return False
    return hmac.compare_digest(computed, presented)
