"""Settings do endpoint de data exchange de Flows.

Chave privada, secret HMAC e variante de protocolo acordada com o cliente.
A variante é sempre explícita; overrides de hash OAEP, fallback e política
de IV só se aplicam quando informados.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from app.infra.crypto.variants import (
    DEFAULT_VARIANT_NAME,
    ProtocolVariant,
    resolve_protocol_variant,
)


@dataclass(frozen=True)
class FlowEndpointSettings:
    """Configurações do endpoint de Flows.

    Attributes:
        private_key_path: Caminho do PEM da chave privada RSA
        private_key_pem: PEM inline (alternativa ao caminho)
        private_key_passphrase: Senha da chave privada (opcional)
        app_secret: Secret do app Meta para HMAC de X-Hub-Signature-256
        allow_unsigned_requests: Modo aberto explícito (sem validação HMAC)
        protocol_variant: cbc | gcm_appended | gcm_separate
        oaep_hash: Override do hash OAEP (sha256|sha1), vazio = padrão da variante
        oaep_fallback: Override do fallback entre hashes OAEP, None = padrão
        iv_policy: Override da política de IV (reuse|flip), vazio = padrão
    """

    private_key_path: str = ""
    private_key_pem: str = ""
    private_key_passphrase: str = ""
    app_secret: str = ""
    allow_unsigned_requests: bool = False
    protocol_variant: str = DEFAULT_VARIANT_NAME
    oaep_hash: str = ""
    oaep_fallback: bool | None = None
    iv_policy: str = ""

    @property
    def signature_required(self) -> bool:
        """Validação HMAC é obrigatória salvo modo aberto explícito."""
        return not self.allow_unsigned_requests

    def resolve_variant(self) -> ProtocolVariant:
        """Variante com overrides aplicados.

        Raises:
            ValueError: Se variante ou override forem inválidos
        """
        return resolve_protocol_variant(
            self.protocol_variant,
            oaep_hash=self.oaep_hash or None,
            oaep_fallback=self.oaep_fallback,
            iv_policy=self.iv_policy or None,
        )

    def validate(self) -> list[str]:
        """Valida configurações mínimas do endpoint.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.private_key_path and not self.private_key_pem:
            errors.append("FLOW_PRIVATE_KEY_PATH ou FLOW_PRIVATE_KEY não configurado")

        if not self.app_secret and not self.allow_unsigned_requests:
            errors.append(
                "FLOW_APP_SECRET não configurado "
                "(defina FLOW_ALLOW_UNSIGNED_REQUESTS=true para modo aberto)"
            )

        try:
            self.resolve_variant()
        except ValueError as exc:
            errors.append(str(exc))

        return errors


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_optional_bool(key: str) -> bool | None:
    raw_value = os.getenv(key, "").strip()
    if not raw_value:
        return None
    return _parse_bool(raw_value)


def _load_from_env() -> FlowEndpointSettings:
    """Carrega FlowEndpointSettings a partir de variáveis de ambiente."""
    return FlowEndpointSettings(
        private_key_path=os.getenv("FLOW_PRIVATE_KEY_PATH", os.getenv("PRIVATE_KEY_PATH", "")),
        private_key_pem=os.getenv("FLOW_PRIVATE_KEY", ""),
        private_key_passphrase=os.getenv("FLOW_PRIVATE_KEY_PASSPHRASE", ""),
        app_secret=os.getenv("FLOW_APP_SECRET", os.getenv("APP_SECRET", "")),
        allow_unsigned_requests=_parse_bool(os.getenv("FLOW_ALLOW_UNSIGNED_REQUESTS", "false")),
        protocol_variant=os.getenv("FLOW_PROTOCOL_VARIANT", DEFAULT_VARIANT_NAME),
        oaep_hash=os.getenv("FLOW_OAEP_HASH", ""),
        oaep_fallback=_parse_optional_bool("FLOW_OAEP_FALLBACK"),
        iv_policy=os.getenv("FLOW_IV_POLICY", ""),
    )


@lru_cache(maxsize=1)
def get_flow_endpoint_settings() -> FlowEndpointSettings:
    """Retorna instância cacheada de FlowEndpointSettings."""
    return _load_from_env()


__all__ = ["FlowEndpointSettings", "get_flow_endpoint_settings"]
