"""Constantes criptográficas do envelope de Flows."""

AES_BLOCK_SIZE = 16  # 128 bits, igual para AES-128/192/256
AES_KEY_SIZES_ALLOWED = (16, 24, 32)  # 128/192/256 bits
CBC_IV_SIZE = 16
GCM_IV_SIZES_ALLOWED = (12, 16)  # 96 bits recomendado; a Meta envia 128 bits
TAG_SIZE = 16  # 128 bits

SIGNATURE_PREFIX = "sha256="
SIGNATURE_HEADER = "x-hub-signature-256"
