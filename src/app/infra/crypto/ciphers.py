"""Primitivas AES (CBC e GCM) usadas pelo envelope de Flows.

Cada chamada cria um contexto de cifra novo; nenhum estado é compartilhado
entre requests.
"""

from __future__ import annotations

import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from config.logging import log_fallback

from .constants import AES_BLOCK_SIZE, AES_KEY_SIZES_ALLOWED, CBC_IV_SIZE, GCM_IV_SIZES_ALLOWED, TAG_SIZE
from .errors import (
    AuthenticationFailedError,
    InvalidCiphertextLengthError,
    InvalidIVError,
    InvalidPaddingError,
    UnsupportedKeyLengthError,
)

logger = logging.getLogger(__name__)


def flip_iv(iv: bytes) -> bytes:
    """Inverte todos os bits do IV (XOR 0xFF). Aplicar duas vezes devolve o original."""
    return bytes(byte ^ 0xFF for byte in iv)


def aes_key_bits(key: bytes) -> int:
    """Retorna o tamanho da cifra (128/192/256) a partir da chave."""
    if len(key) not in AES_KEY_SIZES_ALLOWED:
        raise UnsupportedKeyLengthError(f"Invalid AES key size: {len(key)}")
    return len(key) * 8


def _check_gcm_iv(iv: bytes) -> None:
    if len(iv) not in GCM_IV_SIZES_ALLOWED:
        raise InvalidIVError(f"GCM IV must be 12 or 16 bytes, got {len(iv)}")


def cbc_decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    """Decifra AES-CBC e remove padding PKCS#7.

    Raises:
        InvalidIVError: IV diferente de 16 bytes
        InvalidCiphertextLengthError: Ciphertext vazio ou fora do bloco de 16 bytes
        InvalidPaddingError: Padding inconsistente mesmo após remoção manual
    """
    aes_key_bits(key)
    if len(iv) != CBC_IV_SIZE:
        raise InvalidIVError(f"CBC IV must be {CBC_IV_SIZE} bytes, got {len(iv)}")
    if not ciphertext or len(ciphertext) % AES_BLOCK_SIZE:
        raise InvalidCiphertextLengthError(
            f"CBC ciphertext length must be a multiple of {AES_BLOCK_SIZE}, "
            f"got {len(ciphertext)}"
        )

    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(AES_BLOCK_SIZE * 8).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        pad_len = padded[-1]
        if not 1 <= pad_len <= AES_BLOCK_SIZE:
            raise InvalidPaddingError(f"CBC padding removal failed: {exc}") from exc
        log_fallback(logger, "cbc_padding", reason="manual_padding_removal")
        return padded[:-pad_len]


def cbc_encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    """Aplica padding PKCS#7 e cifra com AES-CBC."""
    aes_key_bits(key)
    if len(iv) != CBC_IV_SIZE:
        raise InvalidIVError(f"CBC IV must be {CBC_IV_SIZE} bytes, got {len(iv)}")
    padder = padding.PKCS7(AES_BLOCK_SIZE * 8).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def gcm_decrypt(key: bytes, iv: bytes, ciphertext: bytes, tag: bytes | None = None) -> bytes:
    """Decifra AES-GCM verificando a tag.

    Sem `tag`, os 16 bytes finais de `ciphertext` são a tag (convenção da Meta).

    Raises:
        InvalidIVError: IV com tamanho fora de 12/16 bytes
        InvalidCiphertextLengthError: Payload menor que a tag
        AuthenticationFailedError: Tag ausente, truncada ou que não confere
    """
    aes_key_bits(key)
    _check_gcm_iv(iv)
    if tag is None:
        if len(ciphertext) < TAG_SIZE:
            raise InvalidCiphertextLengthError(
                f"GCM payload must carry a {TAG_SIZE}-byte tag, got {len(ciphertext)} bytes"
            )
        body, tag = ciphertext[:-TAG_SIZE], ciphertext[-TAG_SIZE:]
    else:
        body = ciphertext
    if len(tag) != TAG_SIZE:
        raise AuthenticationFailedError(f"GCM tag must be {TAG_SIZE} bytes, got {len(tag)}")

    try:
        return AESGCM(key).decrypt(iv, body + tag, None)
    except InvalidTag as exc:
        raise AuthenticationFailedError("GCM authentication tag mismatch") from exc


def gcm_encrypt(key: bytes, iv: bytes, plaintext: bytes) -> tuple[bytes, bytes]:
    """Cifra com AES-GCM e retorna (ciphertext, tag)."""
    aes_key_bits(key)
    _check_gcm_iv(iv)
    sealed = AESGCM(key).encrypt(iv, plaintext, None)
    return sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]


__all__ = [
    "aes_key_bits",
    "cbc_decrypt",
    "cbc_encrypt",
    "flip_iv",
    "gcm_decrypt",
    "gcm_encrypt",
]
