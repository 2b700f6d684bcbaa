"""Módulo de criptografia para WhatsApp Flows.

Implementa o envelope híbrido (RSA-OAEP + AES-CBC/GCM) do endpoint de
data exchange e a validação HMAC do request:

- keys: carga da chave privada e recuperação da chave AES
- envelope: parse dos campos de wire por variante
- ciphers: primitivas AES
- flow_encryption: descriptografia do request e criptografia da resposta
- signature: validação de X-Hub-Signature-256
"""

from .ciphers import flip_iv
from .constants import AES_BLOCK_SIZE, AES_KEY_SIZES_ALLOWED, SIGNATURE_HEADER, TAG_SIZE
from .envelope import FlowEnvelope, OutboundEnvelope, SymmetricKeyMaterial, parse_flow_envelope
from .errors import (
    AuthenticationFailedError,
    EncryptionError,
    FlowCryptoError,
    FlowDecryptionError,
    InvalidCiphertextLengthError,
    InvalidIVError,
    InvalidPaddingError,
    KeyLoadError,
    KeyMismatchError,
    MalformedRequestError,
    PayloadParseError,
    SignatureConfigurationError,
    SignatureInvalidError,
    UnsupportedKeyLengthError,
)
from .flow_encryption import DecryptedFlowRequest, decrypt_flow_request, encrypt_flow_response
from .keys import decrypt_aes_key, detect_key_format, load_private_key, load_private_key_file
from .signature import validate_flow_signature
from .variants import PROTOCOL_VARIANTS, ProtocolVariant, resolve_protocol_variant

__all__ = [
    "AES_BLOCK_SIZE",
    "AES_KEY_SIZES_ALLOWED",
    "PROTOCOL_VARIANTS",
    "SIGNATURE_HEADER",
    "TAG_SIZE",
    "AuthenticationFailedError",
    "DecryptedFlowRequest",
    "EncryptionError",
    "FlowCryptoError",
    "FlowDecryptionError",
    "FlowEnvelope",
    "InvalidCiphertextLengthError",
    "InvalidIVError",
    "InvalidPaddingError",
    "KeyLoadError",
    "KeyMismatchError",
    "MalformedRequestError",
    "OutboundEnvelope",
    "PayloadParseError",
    "ProtocolVariant",
    "SignatureConfigurationError",
    "SignatureInvalidError",
    "SymmetricKeyMaterial",
    "UnsupportedKeyLengthError",
    "decrypt_aes_key",
    "decrypt_flow_request",
    "detect_key_format",
    "encrypt_flow_response",
    "flip_iv",
    "load_private_key",
    "load_private_key_file",
    "parse_flow_envelope",
    "resolve_protocol_variant",
    "validate_flow_signature",
]
