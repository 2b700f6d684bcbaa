"""Testes para criptografia do endpoint de WhatsApp Flow."""

from __future__ import annotations

import base64
import json
import os

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.infra.crypto.envelope import SymmetricKeyMaterial, parse_flow_envelope
from app.infra.crypto.errors import (
    AuthenticationFailedError,
    EncryptionError,
    KeyMismatchError,
    PayloadParseError,
)
from app.infra.crypto.flow_encryption import (
    decrypt_flow_request,
    encrypt_flow_response,
    response_iv,
)
from app.infra.crypto.variants import (
    CBC_VARIANT,
    GCM_APPENDED_TAG_VARIANT,
    GCM_SEPARATE_TAG_VARIANT,
    resolve_protocol_variant,
)
from tests.fakes.flow_envelopes import (
    build_envelope,
    get_test_private_key,
    open_response,
)

PING = {"action": "ping", "flow_token": "tok", "screen": "APPOINTMENT", "data": {}, "version": "3.0"}
VARIANTS = [CBC_VARIANT, GCM_APPENDED_TAG_VARIANT, GCM_SEPARATE_TAG_VARIANT]


@pytest.mark.parametrize("variant", VARIANTS, ids=lambda v: v.name)
def test_decrypt_and_encrypt_roundtrip(variant) -> None:
    body, aes_key, iv = build_envelope(PING, variant)

    envelope = parse_flow_envelope(body, variant)
    decrypted = decrypt_flow_request(envelope, get_test_private_key(), variant)

    assert decrypted.payload == PING
    assert decrypted.aes_key == aes_key
    assert decrypted.iv == iv

    outbound = encrypt_flow_response({"data": {"status": "active"}}, decrypted.key_material, variant)
    assert open_response(outbound.fields, aes_key, iv, variant) == {"data": {"status": "active"}}


@pytest.mark.parametrize("key_size", [16, 24, 32])
def test_all_aes_key_sizes(key_size: int) -> None:
    variant = GCM_APPENDED_TAG_VARIANT
    body, _, _ = build_envelope(PING, variant, aes_key=os.urandom(key_size))
    decrypted = decrypt_flow_request(parse_flow_envelope(body, variant), get_test_private_key(), variant)
    assert len(decrypted.aes_key) == key_size


def test_gcm_appended_response_is_base64_of_ciphertext_and_tag() -> None:
    variant = GCM_APPENDED_TAG_VARIANT
    material = SymmetricKeyMaterial(key=os.urandom(16), iv=os.urandom(12))

    outbound = encrypt_flow_response({"data": {"status": "active"}}, material, variant)

    assert outbound.response_format == "plaintext"
    sealed = base64.b64decode(outbound.as_plaintext())
    flipped = bytes(byte ^ 0xFF for byte in material.iv)
    plaintext = AESGCM(material.key).decrypt(flipped, sealed, None)
    assert plaintext == b'{"data":{"status":"active"}}'


def test_gcm_separate_end_to_end_ping() -> None:
    variant = GCM_SEPARATE_TAG_VARIANT
    body, aes_key, iv = build_envelope({"action": "ping"}, variant)

    decrypted = decrypt_flow_request(
        parse_flow_envelope(body, variant), get_test_private_key(), variant
    )
    assert decrypted.payload == {"action": "ping"}

    outbound = encrypt_flow_response({"data": {"status": "active"}}, decrypted.key_material, variant)
    fields = outbound.as_json()
    assert set(fields) == {"encrypted_body", "initial_vector", "authentication_tag"}
    assert base64.b64decode(fields["initial_vector"]) == bytes(b ^ 0xFF for b in iv)
    assert len(base64.b64decode(fields["authentication_tag"])) == 16
    assert open_response(fields, aes_key, iv, variant) == {"data": {"status": "active"}}


def test_cbc_reuses_request_iv() -> None:
    material = SymmetricKeyMaterial(key=os.urandom(16), iv=os.urandom(16))
    assert response_iv(material.iv, CBC_VARIANT) == material.iv
    assert response_iv(material.iv, GCM_APPENDED_TAG_VARIANT) != material.iv

    outbound = encrypt_flow_response({"ok": True}, material, CBC_VARIANT)
    assert outbound.response_format == "json"
    assert list(outbound.as_json()) == ["encrypted_flow_data"]


def test_iv_policy_override_flips_cbc_response_iv() -> None:
    variant = resolve_protocol_variant("cbc", iv_policy="flip")
    body, aes_key, iv = build_envelope(PING, variant)
    decrypted = decrypt_flow_request(parse_flow_envelope(body, variant), get_test_private_key(), variant)
    outbound = encrypt_flow_response({"data": {}}, decrypted.key_material, variant)
    assert open_response(outbound.fields, aes_key, iv, variant) == {"data": {}}


def test_response_serialization_is_compact_and_keeps_unicode() -> None:
    material = SymmetricKeyMaterial(key=os.urandom(16), iv=os.urandom(12))
    outbound = encrypt_flow_response({"msg": "olá"}, material, GCM_APPENDED_TAG_VARIANT)
    flipped = bytes(byte ^ 0xFF for byte in material.iv)
    plaintext = AESGCM(material.key).decrypt(flipped, base64.b64decode(outbound.as_plaintext()), None)
    assert plaintext == '{"msg":"olá"}'.encode()


def test_decrypt_with_other_private_key_raises_key_mismatch() -> None:
    variant = GCM_APPENDED_TAG_VARIANT
    body, _, _ = build_envelope(PING, variant, private_key=get_test_private_key(1))
    with pytest.raises(KeyMismatchError):
        decrypt_flow_request(parse_flow_envelope(body, variant), get_test_private_key(), variant)


def test_sha1_wrapped_key_needs_fallback() -> None:
    strict = GCM_APPENDED_TAG_VARIANT
    tolerant = resolve_protocol_variant("gcm_appended", oaep_fallback=True)
    body, _, _ = build_envelope(PING, strict, oaep_hash="sha1")

    with pytest.raises(KeyMismatchError):
        decrypt_flow_request(parse_flow_envelope(body, strict), get_test_private_key(), strict)

    decrypted = decrypt_flow_request(
        parse_flow_envelope(body, tolerant), get_test_private_key(), tolerant
    )
    assert decrypted.payload == PING


def test_tampered_gcm_payload_raises_authentication_failed() -> None:
    variant = GCM_APPENDED_TAG_VARIANT
    body, _, _ = build_envelope(PING, variant)
    sealed = bytearray(base64.b64decode(body["encrypted_flow_data"]))
    sealed[0] ^= 0x01
    body["encrypted_flow_data"] = base64.b64encode(bytes(sealed)).decode()

    with pytest.raises(AuthenticationFailedError):
        decrypt_flow_request(parse_flow_envelope(body, variant), get_test_private_key(), variant)


@pytest.mark.parametrize("plaintext", [b"not json", b"\xff\xfe\xfd"])
def test_invalid_plaintext_raises_payload_parse_error(plaintext: bytes) -> None:
    variant = GCM_APPENDED_TAG_VARIANT
    body, _, _ = build_envelope(None, variant, plaintext=plaintext)
    with pytest.raises(PayloadParseError):
        decrypt_flow_request(parse_flow_envelope(body, variant), get_test_private_key(), variant)


def test_non_object_json_payload_is_returned_as_is() -> None:
    variant = GCM_APPENDED_TAG_VARIANT
    body, _, _ = build_envelope([1, 2, 3], variant)
    decrypted = decrypt_flow_request(parse_flow_envelope(body, variant), get_test_private_key(), variant)
    assert decrypted.payload == [1, 2, 3]


def test_unserializable_response_raises_encryption_error() -> None:
    material = SymmetricKeyMaterial(key=os.urandom(16), iv=os.urandom(12))
    with pytest.raises(EncryptionError):
        encrypt_flow_response({"value": object()}, material, GCM_APPENDED_TAG_VARIANT)


def test_invalid_iv_on_response_raises_encryption_error() -> None:
    material = SymmetricKeyMaterial(key=os.urandom(16), iv=os.urandom(12))
    with pytest.raises(EncryptionError):
        encrypt_flow_response({"data": {}}, material, CBC_VARIANT)


def test_concurrent_requests_keep_their_own_keys() -> None:
    variant = GCM_APPENDED_TAG_VARIANT
    requests = [build_envelope({"n": n}, variant) for n in range(3)]
    decrypted = [
        decrypt_flow_request(parse_flow_envelope(body, variant), get_test_private_key(), variant)
        for body, _, _ in requests
    ]
    for n, ((_, aes_key, iv), item) in enumerate(zip(requests, decrypted, strict=True)):
        outbound = encrypt_flow_response({"n": n}, item.key_material, variant)
        assert open_response(outbound.fields, aes_key, iv, variant) == {"n": n}


def test_decrypt_logs_do_not_contain_plaintext(caplog: pytest.LogCaptureFixture) -> None:
    variant = GCM_APPENDED_TAG_VARIANT
    payload = {"action": "data_exchange", "data": {"email": "secret@example.com"}}
    body, _, _ = build_envelope(payload, variant)
    with caplog.at_level("DEBUG"):
        decrypt_flow_request(parse_flow_envelope(body, variant), get_test_private_key(), variant)
    assert "secret@example.com" not in caplog.text
    assert json.dumps(payload) not in caplog.text
