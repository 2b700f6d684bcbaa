"""Coordenação do envelope criptografado do endpoint de Flows.

O handler recebe a chave privada já carregada (injeção de dependência), a
variante de protocolo e o secret HMAC; não lê arquivos nem variáveis de
ambiente, o que permite testar com chaves em memória.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.infra.crypto import (
    SignatureInvalidError,
    decrypt_flow_request,
    encrypt_flow_response,
    load_private_key,
    load_private_key_file,
    parse_flow_envelope,
    validate_flow_signature,
)
from app.infra.crypto.errors import KeyLoadError

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

    from app.infra.crypto import (
        DecryptedFlowRequest,
        OutboundEnvelope,
        ProtocolVariant,
        SymmetricKeyMaterial,
    )
    from config.settings.flow_endpoint import FlowEndpointSettings

logger = logging.getLogger(__name__)


class FlowEndpointHandler:
    """Valida, abre e fecha o envelope de cada request de Flow."""

    __slots__ = ("_private_key", "_secret", "_signature_required", "_variant")

    def __init__(
        self,
        *,
        private_key: RSAPrivateKey,
        variant: ProtocolVariant,
        app_secret: str | None,
        signature_required: bool = True,
    ) -> None:
        """Inicializa com dependências já construídas.

        Args:
            private_key: Chave privada RSA (somente leitura após construção)
            variant: Variante de protocolo do deployment
            app_secret: Secret do app para HMAC; vazio = sem validação
            signature_required: Falha se `app_secret` estiver vazio
        """
        self._private_key = private_key
        self._variant = variant
        self._secret = app_secret.encode("utf-8") if app_secret else None
        self._signature_required = signature_required

    @property
    def variant(self) -> ProtocolVariant:
        return self._variant

    def verify_signature(self, raw_body: bytes, signature: str | None) -> None:
        """Valida X-Hub-Signature-256 sobre o corpo bruto.

        Raises:
            SignatureInvalidError: Assinatura ausente ou divergente
            SignatureConfigurationError: Secret exigido e não configurado
        """
        if not validate_flow_signature(
            raw_body,
            signature,
            self._secret,
            required=self._signature_required,
        ):
            logger.warning(
                "flow_signature_invalid",
                extra={
                    "component": "flow_endpoint",
                    "has_signature": bool(signature),
                    "body_len": len(raw_body),
                },
            )
            raise SignatureInvalidError("x-hub-signature-256 verification failed")

    def decrypt_request(self, body: Any) -> DecryptedFlowRequest:
        """Extrai o envelope do JSON e descriptografa o payload."""
        envelope = parse_flow_envelope(body, self._variant)
        return decrypt_flow_request(envelope, self._private_key, self._variant)

    def encrypt_response(
        self,
        response: Any,
        key_material: SymmetricKeyMaterial,
    ) -> OutboundEnvelope:
        return encrypt_flow_response(response, key_material, self._variant)


def create_flow_endpoint_handler(settings: FlowEndpointSettings) -> FlowEndpointHandler:
    """Factory a partir das settings: carrega a chave e resolve a variante.

    Raises:
        KeyLoadError: Se nenhuma chave estiver configurada ou a carga falhar
        ValueError: Se a variante configurada for inválida
    """
    passphrase = settings.private_key_passphrase or None
    if settings.private_key_pem:
        private_key = load_private_key(settings.private_key_pem, passphrase)
    elif settings.private_key_path:
        private_key = load_private_key_file(settings.private_key_path, passphrase)
    else:
        raise KeyLoadError("No private key configured (FLOW_PRIVATE_KEY_PATH / FLOW_PRIVATE_KEY)")

    variant = settings.resolve_variant()
    if not settings.app_secret:
        logger.warning(
            "flow_signature_validation_disabled",
            extra={
                "component": "flow_endpoint",
                "allow_unsigned_requests": settings.allow_unsigned_requests,
            },
        )
    logger.info(
        "flow_endpoint_handler_ready",
        extra={
            "component": "flow_endpoint",
            "variant": variant.name,
            "cipher_mode": variant.cipher_mode,
            "iv_policy": variant.iv_policy,
            "oaep_hashes": list(variant.oaep_hash_order),
        },
    )
    return FlowEndpointHandler(
        private_key=private_key,
        variant=variant,
        app_secret=settings.app_secret,
        signature_required=settings.signature_required,
    )
