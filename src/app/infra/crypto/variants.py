"""Variantes do protocolo de envelope criptografado.

Cada deployment fala uma variante fixa com o cliente; a variante nunca é
inferida a partir do formato do payload recebido.

Variantes conhecidas:
- `cbc`: AES-CBC sem tag, campos `encrypted_flow_data`/`encrypted_aes_key`/
  `initial_vector`, IV reaproveitado na resposta, OAEP com SHA-1.
- `gcm_appended`: AES-GCM com tag nos 16 bytes finais de `encrypted_flow_data`,
  IV invertido na resposta, OAEP com SHA-256, resposta em texto base64 puro.
- `gcm_separate`: AES-GCM com tag em `authentication_tag`, campos
  `encrypted_body`/`encrypted_key`, IV invertido, OAEP com SHA-256.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

CipherMode = Literal["cbc", "gcm"]
TagPlacement = Literal["none", "appended", "separate"]
IvPolicy = Literal["reuse", "flip"]
OaepHash = Literal["sha256", "sha1"]
ResponseFormat = Literal["plaintext", "json"]

OAEP_HASHES: tuple[OaepHash, ...] = ("sha256", "sha1")
IV_POLICIES: tuple[IvPolicy, ...] = ("reuse", "flip")


@dataclass(frozen=True, slots=True)
class WireFields:
    """Nomes dos campos do envelope no JSON trafegado."""

    encrypted_payload: str
    encrypted_key: str
    initial_vector: str
    authentication_tag: str | None = None


@dataclass(frozen=True, slots=True)
class ProtocolVariant:
    """Parâmetros de protocolo acordados com o cliente do Flow.

    Attributes:
        name: Identificador da variante (ex: gcm_appended)
        cipher_mode: Modo AES (cbc|gcm)
        tag_placement: Onde a tag GCM trafega (none|appended|separate)
        iv_policy: IV da resposta igual ao do request ou invertido bit a bit
        oaep_hash: Hash do OAEP/MGF1 usado na chave simétrica
        oaep_fallback: Tenta o outro hash quando o primário falhar
        request_fields: Campos do envelope recebido
        response_fields: Campos do envelope devolvido
        response_format: Corpo da resposta em texto base64 ou JSON
    """

    name: str
    cipher_mode: CipherMode
    tag_placement: TagPlacement
    iv_policy: IvPolicy
    oaep_hash: OaepHash
    oaep_fallback: bool
    request_fields: WireFields
    response_fields: WireFields
    response_format: ResponseFormat

    @property
    def oaep_hash_order(self) -> tuple[OaepHash, ...]:
        """Hashes OAEP na ordem em que devem ser tentados."""
        if not self.oaep_fallback:
            return (self.oaep_hash,)
        return (self.oaep_hash, *(name for name in OAEP_HASHES if name != self.oaep_hash))

    @property
    def required_request_fields(self) -> tuple[str, ...]:
        fields = self.request_fields
        names = [fields.encrypted_payload, fields.encrypted_key, fields.initial_vector]
        if self.tag_placement == "separate" and fields.authentication_tag:
            names.append(fields.authentication_tag)
        return tuple(names)


_META_FIELDS = WireFields(
    encrypted_payload="encrypted_flow_data",
    encrypted_key="encrypted_aes_key",
    initial_vector="initial_vector",
)

_SEPARATE_TAG_FIELDS = WireFields(
    encrypted_payload="encrypted_body",
    encrypted_key="encrypted_key",
    initial_vector="initial_vector",
    authentication_tag="authentication_tag",
)

CBC_VARIANT = ProtocolVariant(
    name="cbc",
    cipher_mode="cbc",
    tag_placement="none",
    iv_policy="reuse",
    oaep_hash="sha1",
    oaep_fallback=False,
    request_fields=_META_FIELDS,
    response_fields=_META_FIELDS,
    response_format="json",
)

GCM_APPENDED_TAG_VARIANT = ProtocolVariant(
    name="gcm_appended",
    cipher_mode="gcm",
    tag_placement="appended",
    iv_policy="flip",
    oaep_hash="sha256",
    oaep_fallback=False,
    request_fields=_META_FIELDS,
    response_fields=_META_FIELDS,
    response_format="plaintext",
)

GCM_SEPARATE_TAG_VARIANT = ProtocolVariant(
    name="gcm_separate",
    cipher_mode="gcm",
    tag_placement="separate",
    iv_policy="flip",
    oaep_hash="sha256",
    oaep_fallback=False,
    request_fields=_SEPARATE_TAG_FIELDS,
    response_fields=_SEPARATE_TAG_FIELDS,
    response_format="json",
)

PROTOCOL_VARIANTS: dict[str, ProtocolVariant] = {
    variant.name: variant
    for variant in (CBC_VARIANT, GCM_APPENDED_TAG_VARIANT, GCM_SEPARATE_TAG_VARIANT)
}

DEFAULT_VARIANT_NAME = GCM_APPENDED_TAG_VARIANT.name


def resolve_protocol_variant(
    name: str,
    *,
    oaep_hash: str | None = None,
    oaep_fallback: bool | None = None,
    iv_policy: str | None = None,
) -> ProtocolVariant:
    """Resolve variante pelo nome aplicando overrides explícitos.

    Args:
        name: Nome da variante (cbc|gcm_appended|gcm_separate)
        oaep_hash: Override do hash OAEP (sha256|sha1)
        oaep_fallback: Override do fallback entre hashes OAEP
        iv_policy: Override da política de IV (reuse|flip)

    Raises:
        ValueError: Se nome ou override não forem reconhecidos
    """
    variant = PROTOCOL_VARIANTS.get(name.strip().lower())
    if variant is None:
        valid = ", ".join(sorted(PROTOCOL_VARIANTS))
        raise ValueError(f"Variante de protocolo desconhecida: {name}. Válidas: {valid}")

    if oaep_hash:
        normalized_hash = oaep_hash.strip().lower().replace("-", "")
        if normalized_hash not in OAEP_HASHES:
            raise ValueError(f"Hash OAEP inválido: {oaep_hash}")
        variant = replace(variant, oaep_hash=normalized_hash)
    if oaep_fallback is not None:
        variant = replace(variant, oaep_fallback=oaep_fallback)
    if iv_policy:
        normalized_policy = iv_policy.strip().lower()
        if normalized_policy not in IV_POLICIES:
            raise ValueError(f"Política de IV inválida: {iv_policy}")
        variant = replace(variant, iv_policy=normalized_policy)
    return variant


__all__ = [
    "CBC_VARIANT",
    "DEFAULT_VARIANT_NAME",
    "GCM_APPENDED_TAG_VARIANT",
    "GCM_SEPARATE_TAG_VARIANT",
    "IV_POLICIES",
    "OAEP_HASHES",
    "PROTOCOL_VARIANTS",
    "ProtocolVariant",
    "WireFields",
    "resolve_protocol_variant",
]
