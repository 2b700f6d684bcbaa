"""Operações de chave RSA e AES para Flows."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.hashes import SHA1, SHA256, HashAlgorithm

from config.logging import fingerprint, log_fallback

from .constants import AES_KEY_SIZES_ALLOWED
from .errors import KeyLoadError, KeyMismatchError, UnsupportedKeyLengthError

if TYPE_CHECKING:
    import os
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

KeyFormat = Literal["pkcs1", "pkcs8"]

_PEM_HEADER = "-----BEGIN"
_OAEP_HASH_ALGORITHMS: dict[str, type[HashAlgorithm]] = {
    "sha256": SHA256,
    "sha1": SHA1,
}


def detect_key_format(private_key_pem: str) -> KeyFormat:
    """Detecta o encoding da chave pelo header PEM.

    `RSA PRIVATE KEY` indica PKCS#1; `PRIVATE KEY` e `ENCRYPTED PRIVATE KEY`
    indicam PKCS#8.
    """
    return "pkcs1" if "BEGIN RSA PRIVATE KEY" in private_key_pem else "pkcs8"


def _normalize_pem(private_key_pem: str | bytes) -> str:
    text = (
        private_key_pem.decode("utf-8", errors="replace")
        if isinstance(private_key_pem, bytes)
        else private_key_pem
    )
    # PEM guardado em variável de ambiente de uma linha só
    if "\\n" in text and "\n" not in text.strip():
        text = text.replace("\\n", "\n")
    return text.replace("\r", "").strip()


def load_private_key(
    private_key_pem: str | bytes,
    passphrase: str | None = None,
) -> rsa.RSAPrivateKey:
    """Carrega chave privada RSA em formato PEM.

    Args:
        private_key_pem: Chave privada em formato PEM (PKCS#1 ou PKCS#8)
        passphrase: Senha da chave (opcional)

    Returns:
        Objeto de chave privada RSA

    Raises:
        KeyLoadError: Se o PEM for inválido, a senha faltar ou estiver errada
    """
    pem = _normalize_pem(private_key_pem)
    if not pem.startswith(_PEM_HEADER):
        raise KeyLoadError("Invalid private key: content is not a PEM block")

    key_format = detect_key_format(pem)
    passphrase_bytes = passphrase.encode() if passphrase and passphrase.strip() else None

    def _load(password: bytes | None) -> object:
        return serialization.load_pem_private_key(
            pem.encode("utf-8"),
            password=password,
            backend=default_backend(),
        )

    try:
        private_key = _load(passphrase_bytes)
    except TypeError as exc:
        exc_text = str(exc).lower()
        if passphrase_bytes and "not encrypted" in exc_text:
            # Passphrase injetada por configuração para uma chave sem senha.
            try:
                private_key = _load(None)
            except (ValueError, TypeError, UnsupportedAlgorithm) as retry_exc:
                raise KeyLoadError(f"Invalid private key: {retry_exc}") from retry_exc
        elif passphrase_bytes is None:
            raise KeyLoadError(
                "Invalid private key: key is encrypted but no passphrase was supplied"
            ) from exc
        else:
            raise KeyLoadError(f"Invalid private key: {exc}") from exc
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeyLoadError(f"Invalid private key ({key_format}): {exc}") from exc

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise KeyLoadError(f"Invalid private key: expected RSA, got {type(private_key).__name__}")

    logger.info(
        "flow_private_key_loaded",
        extra={
            "component": "key_store",
            "key_format": key_format,
            "key_size": private_key.key_size,
            "encrypted": passphrase_bytes is not None,
        },
    )
    return private_key


def load_private_key_file(
    path: str | os.PathLike[str],
    passphrase: str | None = None,
) -> rsa.RSAPrivateKey:
    """Lê o arquivo PEM e delega para `load_private_key`.

    Raises:
        KeyLoadError: Se o arquivo não puder ser lido ou a chave for inválida
    """
    try:
        pem = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise KeyLoadError(f"Could not read private key file: {type(exc).__name__}") from exc
    return load_private_key(pem, passphrase)


def _oaep_padding(hash_name: str) -> padding.OAEP:
    algorithm = _OAEP_HASH_ALGORITHMS[hash_name]
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=algorithm()),
        algorithm=algorithm(),
        label=None,
    )


def decrypt_aes_key(
    private_key: rsa.RSAPrivateKey,
    encrypted_aes_key: bytes,
    *,
    oaep_hashes: Iterable[str] = ("sha256",),
) -> bytes:
    """Descriptografa chave AES criptografada com RSA-OAEP.

    Os hashes são tentados em ordem; a partir do segundo, o uso é registrado
    como fallback.

    Args:
        private_key: Chave privada RSA
        encrypted_aes_key: Chave AES criptografada (bytes já decodificados)
        oaep_hashes: Hashes OAEP a tentar (sha256|sha1)

    Returns:
        Chave AES bruta (128/192/256 bits)

    Raises:
        KeyMismatchError: Se nenhum hash decifrar a chave
        UnsupportedKeyLengthError: Se a chave recuperada tiver tamanho inválido
    """
    attempted: list[str] = []
    aes_key: bytes | None = None
    for hash_name in oaep_hashes:
        if hash_name not in _OAEP_HASH_ALGORITHMS:
            raise ValueError(f"Unsupported OAEP hash: {hash_name}")
        try:
            aes_key = private_key.decrypt(encrypted_aes_key, _oaep_padding(hash_name))
        except ValueError:
            attempted.append(hash_name)
            continue
        if attempted:
            log_fallback(logger, "oaep_hash", reason=f"{attempted[-1]}_failed_{hash_name}_ok")
        break

    if aes_key is None:
        logger.warning(
            "flow_aes_key_decryption_failed",
            extra={
                "component": "key_store",
                "oaep_hashes": attempted,
                "encrypted_key_len": len(encrypted_aes_key),
                "encrypted_key_fp": fingerprint(encrypted_aes_key),
            },
        )
        raise KeyMismatchError(
            f"AES key decryption failed (oaep hashes tried: {', '.join(attempted)})"
        )

    if len(aes_key) not in AES_KEY_SIZES_ALLOWED:
        raise UnsupportedKeyLengthError(f"Invalid AES key size: {len(aes_key)}")

    return aes_key


__all__ = [
    "KeyFormat",
    "decrypt_aes_key",
    "detect_key_format",
    "load_private_key",
    "load_private_key_file",
]
