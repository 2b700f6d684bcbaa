"""Modelos do envelope criptografado e parse dos campos de wire."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .errors import MalformedRequestError

if TYPE_CHECKING:
    from .variants import ProtocolVariant, ResponseFormat

_URLSAFE_BASE64 = re.compile(r"[A-Za-z0-9_\-]+={0,2}")


@dataclass(frozen=True, slots=True)
class FlowEnvelope:
    """Envelope recebido, com campos já decodificados de base64."""

    encrypted_payload: bytes
    encrypted_key: bytes
    initial_vector: bytes
    authentication_tag: bytes | None = None


@dataclass(frozen=True, slots=True)
class SymmetricKeyMaterial:
    """Chave AES e IV recuperados de um request, válidos só para ele."""

    key: bytes
    iv: bytes

    def __repr__(self) -> str:
        return f"SymmetricKeyMaterial(key_len={len(self.key)}, iv_len={len(self.iv)})"


@dataclass(frozen=True, slots=True)
class OutboundEnvelope:
    """Resposta cifrada pronta para o transporte."""

    fields: dict[str, str]
    response_format: ResponseFormat
    primary_field: str

    def as_plaintext(self) -> str:
        """Corpo em texto puro (base64 do campo principal)."""
        return self.fields[self.primary_field]

    def as_json(self) -> dict[str, str]:
        return dict(self.fields)


def decode_base64(raw_value: str, *, field_name: str = "payload") -> bytes:
    """Decodifica base64 padrão, tolerando padding ausente e alfabeto URL-safe.

    Raises:
        MalformedRequestError: Se o valor não for base64 válido
    """
    value = raw_value.strip()
    padded = value + ("=" * (-len(value) % 4))
    try:
        return base64.b64decode(padded, validate=True)
    except (ValueError, binascii.Error):
        # Só aceita urlsafe quando todos os caracteres pertencem ao alfabeto
        if not _URLSAFE_BASE64.fullmatch(value):
            raise MalformedRequestError(
                f"Invalid base64 in {field_name}: invalid characters in input"
            ) from None
        try:
            return base64.urlsafe_b64decode(padded)
        except (ValueError, binascii.Error) as exc:
            raise MalformedRequestError(f"Invalid base64 in {field_name}: {exc}") from exc


def encode_base64(raw_value: bytes) -> str:
    return base64.b64encode(raw_value).decode("utf-8")


def parse_flow_envelope(body: Any, variant: ProtocolVariant) -> FlowEnvelope:
    """Extrai o envelope do corpo JSON conforme os campos da variante.

    Args:
        body: Corpo do request já parseado como JSON
        variant: Variante de protocolo do deployment

    Returns:
        FlowEnvelope com bytes decodificados

    Raises:
        MalformedRequestError: Se algum campo obrigatório faltar, estiver vazio
            ou não for base64
    """
    if not isinstance(body, dict):
        raise MalformedRequestError("Envelope must be a JSON object")

    missing = [
        name
        for name in variant.required_request_fields
        if not isinstance(body.get(name), str) or not body[name].strip()
    ]
    if missing:
        raise MalformedRequestError(f"Missing envelope fields: {', '.join(missing)}")

    fields = variant.request_fields
    decoded: dict[str, bytes] = {}
    for name in variant.required_request_fields:
        value = decode_base64(body[name], field_name=name)
        if not value:
            raise MalformedRequestError(f"Empty envelope field: {name}")
        decoded[name] = value

    tag = decoded.get(fields.authentication_tag) if fields.authentication_tag else None
    return FlowEnvelope(
        encrypted_payload=decoded[fields.encrypted_payload],
        encrypted_key=decoded[fields.encrypted_key],
        initial_vector=decoded[fields.initial_vector],
        authentication_tag=tag,
    )


__all__ = [
    "FlowEnvelope",
    "OutboundEnvelope",
    "SymmetricKeyMaterial",
    "decode_base64",
    "encode_base64",
    "parse_flow_envelope",
]
