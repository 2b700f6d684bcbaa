"""Taxonomia de erros do envelope criptografado de Flows.

Cada erro carrega `status_code`, o status HTTP que a camada de rotas deve
devolver ao cliente. Mensagens nunca incluem material sensível (chaves,
plaintext); apenas tamanhos, nomes de variante e tipos de erro.
"""

from __future__ import annotations


class FlowCryptoError(Exception):
    """Erro em operação criptográfica de Flow."""

    status_code: int = 500


class KeyLoadError(FlowCryptoError):
    """Chave privada ilegível, PEM inválido ou passphrase ausente/incorreta."""


class MalformedRequestError(FlowCryptoError):
    """Envelope sem campos obrigatórios ou com base64 inválido."""

    status_code = 400


class FlowDecryptionError(FlowCryptoError):
    """Base para falhas ao abrir o envelope recebido."""


class KeyMismatchError(FlowDecryptionError):
    """RSA-OAEP falhou: a chave pública do cliente não corresponde à privada.

    O status 421 sinaliza ao cliente que deve baixar a chave pública de novo.
    """

    status_code = 421


class UnsupportedKeyLengthError(FlowDecryptionError):
    """Chave simétrica recuperada com tamanho diferente de 16/24/32 bytes."""


class InvalidIVError(FlowDecryptionError):
    """IV com tamanho incompatível com o modo de cifra."""


class InvalidCiphertextLengthError(FlowDecryptionError):
    """Ciphertext truncado ou corrompido (tamanho incompatível com o modo)."""


class InvalidPaddingError(FlowDecryptionError):
    """Padding PKCS#7 inconsistente após decifrar em CBC."""


class AuthenticationFailedError(FlowDecryptionError):
    """Tag de autenticação GCM não confere (adulteração ou corrupção)."""


class PayloadParseError(FlowDecryptionError):
    """Plaintext não é UTF-8 válido ou não é JSON."""


class EncryptionError(FlowCryptoError):
    """Falha ao cifrar a resposta."""


class SignatureInvalidError(FlowCryptoError):
    """Assinatura HMAC do request não confere."""

    status_code = 432


class SignatureConfigurationError(FlowCryptoError):
    """Validação de assinatura exigida, mas nenhum secret configurado."""


__all__ = [
    "AuthenticationFailedError",
    "EncryptionError",
    "FlowCryptoError",
    "FlowDecryptionError",
    "InvalidCiphertextLengthError",
    "InvalidIVError",
    "InvalidPaddingError",
    "KeyLoadError",
    "KeyMismatchError",
    "MalformedRequestError",
    "PayloadParseError",
    "SignatureConfigurationError",
    "SignatureInvalidError",
    "UnsupportedKeyLengthError",
]
