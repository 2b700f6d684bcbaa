"""Criptografia para endpoint de WhatsApp Flows (data exchange)."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .ciphers import cbc_decrypt, cbc_encrypt, flip_iv, gcm_decrypt, gcm_encrypt
from .envelope import FlowEnvelope, OutboundEnvelope, SymmetricKeyMaterial, encode_base64
from .errors import EncryptionError, FlowCryptoError, PayloadParseError
from .keys import decrypt_aes_key

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

    from .variants import ProtocolVariant

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DecryptedFlowRequest:
    """Payload descriptografado + material para resposta criptografada."""

    payload: Any
    key_material: SymmetricKeyMaterial

    @property
    def aes_key(self) -> bytes:
        return self.key_material.key

    @property
    def iv(self) -> bytes:
        return self.key_material.iv


def response_iv(iv: bytes, variant: ProtocolVariant) -> bytes:
    """IV usado na resposta conforme a política da variante."""
    return flip_iv(iv) if variant.iv_policy == "flip" else iv


def decrypt_flow_request(
    envelope: FlowEnvelope,
    private_key: RSAPrivateKey,
    variant: ProtocolVariant,
) -> DecryptedFlowRequest:
    """Descriptografa request do endpoint de Flow.

    Passos:
    1. RSA-OAEP recupera a chave AES (hash conforme a variante, com fallback opcional)
    2. O tamanho da chave define AES-128/192/256
    3. AES-CBC ou AES-GCM abre o payload com o IV original
    4. Plaintext é decodificado como UTF-8 e parseado como JSON

    Raises:
        KeyMismatchError: Chave AES não decifrável com a chave privada
        UnsupportedKeyLengthError, InvalidIVError, InvalidCiphertextLengthError,
        InvalidPaddingError, AuthenticationFailedError: Defeitos do payload
        PayloadParseError: Plaintext não é JSON UTF-8
    """
    aes_key = decrypt_aes_key(
        private_key,
        envelope.encrypted_key,
        oaep_hashes=variant.oaep_hash_order,
    )
    iv = envelope.initial_vector

    if variant.cipher_mode == "cbc":
        plaintext = cbc_decrypt(aes_key, iv, envelope.encrypted_payload)
    else:
        tag = envelope.authentication_tag if variant.tag_placement == "separate" else None
        plaintext = gcm_decrypt(aes_key, iv, envelope.encrypted_payload, tag)

    try:
        payload = json.loads(plaintext.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise PayloadParseError("Flow payload is not valid UTF-8") from exc
    except json.JSONDecodeError as exc:
        raise PayloadParseError(
            f"Flow payload is not valid JSON (line {exc.lineno}, col {exc.colno})"
        ) from exc

    logger.debug(
        "flow_request_decrypted",
        extra={
            "component": "flow_crypto",
            "variant": variant.name,
            "aes_bits": len(aes_key) * 8,
            "plaintext_len": len(plaintext),
        },
    )
    return DecryptedFlowRequest(
        payload=payload,
        key_material=SymmetricKeyMaterial(key=aes_key, iv=iv),
    )


def encrypt_flow_response(
    response: Any,
    key_material: SymmetricKeyMaterial,
    variant: ProtocolVariant,
) -> OutboundEnvelope:
    """Criptografa resposta para Flow com a mesma chave do request.

    O IV segue a política da variante (reaproveitado ou invertido XOR 0xFF).
    Em GCM com tag anexada o campo principal é base64(ciphertext + tag); com
    tag separada, ciphertext, tag e IV usado seguem em campos próprios.

    Raises:
        EncryptionError: Se a resposta não puder ser serializada ou cifrada
    """
    fields = variant.response_fields
    try:
        plaintext = json.dumps(response, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        iv = response_iv(key_material.iv, variant)
        if variant.cipher_mode == "cbc":
            wire = {fields.encrypted_payload: encode_base64(cbc_encrypt(key_material.key, iv, plaintext))}
        else:
            ciphertext, tag = gcm_encrypt(key_material.key, iv, plaintext)
            if variant.tag_placement == "separate" and fields.authentication_tag:
                wire = {
                    fields.encrypted_payload: encode_base64(ciphertext),
                    fields.initial_vector: encode_base64(iv),
                    fields.authentication_tag: encode_base64(tag),
                }
            else:
                wire = {fields.encrypted_payload: encode_base64(ciphertext + tag)}
    except FlowCryptoError as exc:
        raise EncryptionError(f"Flow response encryption failed: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise EncryptionError(f"Flow response encryption failed: {type(exc).__name__}") from exc

    return OutboundEnvelope(
        fields=wire,
        response_format=variant.response_format,
        primary_field=fields.encrypted_payload,
    )


__all__ = [
    "DecryptedFlowRequest",
    "decrypt_flow_request",
    "encrypt_flow_response",
    "response_iv",
]
