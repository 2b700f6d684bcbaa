"""Testes para config.logging.

Cobre: configure_logging, log_fallback, fingerprint, CorrelationIdFilter,
SensitiveDataFilter e o formatter JSON.
"""

from __future__ import annotations

import json
import logging
from unittest.mock import MagicMock

import pytest

from config.logging import (
    FIELD_RENAME_MAP,
    REDACTED,
    REQUIRED_LOG_FIELDS,
    CorrelationIdFilter,
    SensitiveDataFilter,
    configure_logging,
    create_json_formatter,
    fingerprint,
    log_fallback,
)
from config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS


def _record(msg: str = "flow_request_decrypted", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.infra.crypto.keys",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestConfigureLogging:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [("INFO", logging.INFO), ("debug", logging.DEBUG), ("ERROR", logging.ERROR)],
    )
    def test_sets_root_level(self, level: str, expected: int) -> None:
        configure_logging(level=level)
        assert logging.getLogger().level == expected

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="VERBOSE")

    def test_replaces_existing_handlers_and_installs_filters(self) -> None:
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]

        configure_logging(correlation_id_getter=lambda: "corr-1")

        assert len(root.handlers) == 1
        filters = root.handlers[0].filters
        assert any(isinstance(f, CorrelationIdFilter) for f in filters)
        assert any(isinstance(f, SensitiveDataFilter) for f in filters)

    def test_constants(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS
        assert DEFAULT_SERVICE_NAME == "flow_endpoint"


class TestLogFallback:
    def test_logs_warning_with_component(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "oaep_hash", reason="sha256_failed_sha1_ok")

        logger.warning.assert_called_once()
        args, kwargs = logger.warning.call_args
        assert args == ("Fallback applied for %s", "oaep_hash")
        assert kwargs["extra"] == {
            "fallback_used": True,
            "component": "oaep_hash",
            "reason": "sha256_failed_sha1_ok",
        }

    def test_optional_fields_are_omitted(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "time_options")
        extra = logger.warning.call_args[1]["extra"]
        assert "reason" not in extra
        assert "elapsed_ms" not in extra

    def test_elapsed_ms(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_fallback(logger, "cbc_padding", elapsed_ms=1.5)
        assert logger.warning.call_args[1]["extra"]["elapsed_ms"] == 1.5


def test_fingerprint_is_short_and_stable() -> None:
    value = fingerprint(b"encrypted-key-bytes")
    assert len(value) == 12
    assert value == fingerprint("encrypted-key-bytes")
    assert value != fingerprint(b"other")


class TestCorrelationIdFilter:
    def test_adds_correlation_id_and_service(self) -> None:
        record = _record()
        assert CorrelationIdFilter("flow_endpoint", lambda: "corr-123").filter(record) is True
        assert record.correlation_id == "corr-123"
        assert record.service == "flow_endpoint"

    def test_preserves_explicit_correlation_id(self) -> None:
        record = _record(correlation_id="explicit-id")
        CorrelationIdFilter("svc", lambda: "from-getter").filter(record)
        assert record.correlation_id == "explicit-id"

    def test_without_getter_uses_empty_string(self) -> None:
        record = _record()
        CorrelationIdFilter("svc").filter(record)
        assert record.correlation_id == ""


class TestSensitiveDataFilter:
    def test_masks_sensitive_extras(self) -> None:
        record = _record(aes_key="00112233", plaintext='{"email":"x"}', variant="cbc")
        assert SensitiveDataFilter().filter(record) is True
        assert record.aes_key == REDACTED
        assert record.plaintext == REDACTED
        assert record.variant == "cbc"

    def test_custom_field_list(self) -> None:
        record = _record(token="abc")
        SensitiveDataFilter({"token"}).filter(record)
        assert record.token == REDACTED


class TestJsonFormatter:
    def test_constants(self) -> None:
        assert set(REQUIRED_LOG_FIELDS) == {
            "asctime",
            "levelname",
            "name",
            "message",
            "correlation_id",
            "service",
        }
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}

    def test_formats_record_as_json_with_renamed_fields(self) -> None:
        from pythonjsonlogger.json import JsonFormatter

        formatter = create_json_formatter()
        assert isinstance(formatter, JsonFormatter)

        record = _record(correlation_id="abc-123", service="flow_endpoint", encrypted_key_len=256)
        output = json.loads(formatter.format(record))

        assert output["message"] == "flow_request_decrypted"
        assert output["level"] == "INFO"
        assert output["logger"] == "app.infra.crypto.keys"
        assert output["correlation_id"] == "abc-123"
        assert output["encrypted_key_len"] == 256

    def test_handler_pipeline_masks_before_formatting(self) -> None:
        handler = logging.StreamHandler()
        handler.setFormatter(create_json_formatter())
        handler.addFilter(CorrelationIdFilter("flow_endpoint"))
        handler.addFilter(SensitiveDataFilter())
        record = _record(app_secret="meta_app_secret")

        assert handler.filter(record)
        output = json.loads(handler.format(record))

        assert output["app_secret"] == REDACTED
        assert "meta_app_secret" not in json.dumps(output)
