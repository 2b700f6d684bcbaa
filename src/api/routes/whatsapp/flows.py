"""Endpoint de data-exchange para WhatsApp Flows.

Ordem de processamento de um POST:
1. Handler (chave privada + variante) obtido do bootstrap
2. HMAC de X-Hub-Signature-256 sobre o corpo bruto
3. Parse JSON do envelope e descriptografia
4. Roteamento de telas
5. Criptografia da resposta com a chave AES do próprio request

Cada erro do core carrega o status HTTP correspondente (400/421/432/500).
Nenhuma resposta parcial é enviada: ou o envelope completo, ou só o status.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from app.bootstrap import get_booking_service, get_flow_endpoint_handler
from app.coordinators.whatsapp.flows import DecryptedFlowData
from app.infra.crypto import SIGNATURE_HEADER, FlowCryptoError, MalformedRequestError
from app.observability import CORRELATION_HEADER, correlation_scope
from app.services.flow_screens import UnhandledFlowRequestError, get_next_screen
from config.settings import get_booking_settings

logger = logging.getLogger(__name__)

router = APIRouter()

_COMPONENT = "flow_endpoint"
LIVENESS_TEXT = "Flow data exchange endpoint is running."

_STATUS_TEXT: dict[int, str] = {
    400: "Malformed request",
    421: "Unable to decrypt request",
    432: "Signature verification failed",
    500: "Internal error",
}


@router.get("/", response_class=PlainTextResponse)
async def flow_endpoint_liveness() -> str:
    return LIVENESS_TEXT


@router.post("/")
async def handle_flow_endpoint(request: Request) -> Response:
    """Recebe o envelope criptografado da Meta e devolve a próxima tela cifrada."""
    raw_body = await request.body()
    with correlation_scope(request.headers.get(CORRELATION_HEADER)):
        try:
            return await _process_flow_request(
                raw_body,
                signature=request.headers.get(SIGNATURE_HEADER),
            )
        except FlowCryptoError as exc:
            return _crypto_error_response(exc)
        except UnhandledFlowRequestError as exc:
            logger.error(
                "flow_request_unhandled",
                extra={"component": _COMPONENT, "error_type": type(exc).__name__},
            )
            return _status_response(500)
        except ValueError as exc:
            # variante inválida na configuração
            logger.error(
                "flow_endpoint_misconfigured",
                extra={"component": _COMPONENT, "error_type": type(exc).__name__},
            )
            return _status_response(500)


async def _process_flow_request(raw_body: bytes, *, signature: str | None) -> Response:
    handler = get_flow_endpoint_handler()
    handler.verify_signature(raw_body, signature)

    body = _parse_json_body(raw_body)
    decrypted = handler.decrypt_request(body)
    if not isinstance(decrypted.payload, dict):
        raise UnhandledFlowRequestError("Decrypted payload is not a JSON object")

    flow_data = DecryptedFlowData.from_payload(decrypted.payload)
    logger.info(
        "flow_request_decrypted",
        extra={"component": _COMPONENT, "variant": handler.variant.name, **flow_data.log_fields()},
    )

    booking_settings = get_booking_settings()
    screen_response = await get_next_screen(
        decrypted.payload,
        booking_service=get_booking_service(),
        time_zone=booking_settings.time_zone,
        time_zone_label=booking_settings.time_zone_label,
    )

    outbound = handler.encrypt_response(screen_response, decrypted.key_material)
    logger.info(
        "flow_response_encrypted",
        extra={
            "component": _COMPONENT,
            "variant": handler.variant.name,
            "response_format": outbound.response_format,
            "next_screen": screen_response.get("screen"),
        },
    )
    if outbound.response_format == "json":
        return JSONResponse(content=outbound.as_json(), status_code=200)
    return PlainTextResponse(content=outbound.as_plaintext(), status_code=200)


def _parse_json_body(raw_body: bytes) -> Any:
    try:
        return json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedRequestError("Request body is not valid JSON") from exc


def _crypto_error_response(exc: FlowCryptoError) -> Response:
    status_code = exc.status_code
    log = logger.warning if status_code < 500 else logger.error
    log(
        "flow_request_failed",
        extra={
            "component": _COMPONENT,
            "error_type": type(exc).__name__,
            "status_code": status_code,
        },
    )
    return _status_response(status_code)


def _status_response(status_code: int) -> PlainTextResponse:
    return PlainTextResponse(_STATUS_TEXT.get(status_code, _STATUS_TEXT[500]), status_code=status_code)
