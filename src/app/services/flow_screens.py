"""Roteamento de telas do Flow de agendamento (server-driven).

Telas:
- APPOINTMENT: nome/email/website/empresa + data/horário
- DETAILS: observações adicionais
- SUMMARY: cria a reserva e devolve o link/horário da reunião
- SUCCESS: encerra o Flow com `extension_message_response`

Recebe o payload já descriptografado e devolve o JSON da próxima tela;
não conhece nada do envelope criptográfico.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from app.domain.booking import BookingRequest
from app.services.appointment_availability import (
    describe_date,
    get_date_options,
    get_time_options,
)

if TYPE_CHECKING:
    from app.domain.booking import BookingConfirmation
    from app.protocols.booking_service import BookingServiceProtocol

logger = logging.getLogger(__name__)

# Campo de data gerado pelo Flow Builder quando o id do componente não foi renomeado
_BUILDER_DATE_FIELD = "Choose_your_date_d483b0"
_LOCAL_TIME_FORMAT = "%d %b %Y, %I:%M %p"  # ex: "17 Nov 2025, 10:30 AM"

SCREEN_RESPONSES: dict[str, dict[str, Any]] = {
    "APPOINTMENT": {
        "screen": "APPOINTMENT",
        "data": {
            "name": "",
            "email": "",
            "website": "",
            "company": "",
            "date": [],
            "is_date_enabled": True,
            "time": [],
            "is_time_enabled": False,
        },
    },
    "DETAILS": {
        "screen": "DETAILS",
        "data": {"name": "", "email": "", "website": "", "company": "", "date": "", "time": ""},
    },
    "SUMMARY": {"screen": "SUMMARY", "data": {}},
    "TERMS": {"screen": "TERMS", "data": {}},
    "SUCCESS": {
        "screen": "SUCCESS",
        "data": {"extension_message_response": {"params": {"flow_token": ""}}},
    },
}


class UnhandledFlowRequestError(ValueError):
    """Ação do Flow sem tratamento (nem ping, INIT ou data_exchange)."""


def _screen(name: str) -> dict[str, Any]:
    return copy.deepcopy(SCREEN_RESPONSES[name])


def normalize_form_data(data: Any) -> dict[str, Any]:
    """Copia os campos do formulário resolvendo aliases de data."""
    normalized = dict(data) if isinstance(data, dict) else {}
    normalized["date"] = normalized.get("date") or normalized.get(_BUILDER_DATE_FIELD)
    return normalized


async def get_next_screen(
    decrypted_body: dict[str, Any],
    *,
    booking_service: BookingServiceProtocol,
    time_zone: str = "UTC",
    time_zone_label: str = "UTC",
    now: datetime | None = None,
) -> dict[str, Any]:
    """Decide a próxima tela a partir do request descriptografado.

    Raises:
        UnhandledFlowRequestError: Se a ação não for reconhecida
    """
    action = decrypted_body.get("action")
    screen = decrypted_body.get("screen")
    flow_token = decrypted_body.get("flow_token")
    form = normalize_form_data(decrypted_body.get("data"))

    if action == "ping":
        return {"data": {"status": "active"}}

    if form.get("error"):
        logger.warning(
            "flow_client_error_received",
            extra={"component": "flow_screens", "screen": screen},
        )
        return {"data": {"acknowledged": True}}

    if action == "INIT":
        response = _screen("APPOINTMENT")
        response["data"].update(
            {
                "date": get_date_options(time_zone=time_zone, now=now),
                "is_date_enabled": True,
                "is_time_enabled": False,
            }
        )
        return response

    if action == "data_exchange":
        if screen == "APPOINTMENT":
            return await _appointment_screen(
                form, booking_service=booking_service, time_zone=time_zone, now=now
            )
        if screen == "DETAILS":
            return _summary_screen(form)
        if screen == "SUMMARY":
            return await _success_screen(
                form,
                flow_token=flow_token,
                booking_service=booking_service,
                time_zone=time_zone,
                time_zone_label=time_zone_label,
            )
        logger.error(
            "flow_unhandled_screen",
            extra={"component": "flow_screens", "screen": screen},
        )
        return {"data": {"acknowledged": True}}

    logger.error(
        "flow_unhandled_request",
        extra={"component": "flow_screens", "action": action, "screen": screen},
    )
    raise UnhandledFlowRequestError(
        "Unhandled endpoint request. Make sure you handle the request action & screen."
    )


async def _appointment_screen(
    form: dict[str, Any],
    *,
    booking_service: BookingServiceProtocol,
    time_zone: str,
    now: datetime | None,
) -> dict[str, Any]:
    date_id = form.get("date")
    response = _screen("APPOINTMENT")
    response["data"].update(
        {
            "name": form.get("name") or "",
            "email": form.get("email") or "",
            "website": form.get("website") or "",
            "company": form.get("company") or "",
            "date": get_date_options(time_zone=time_zone, now=now),
            "is_date_enabled": True,
            "is_time_enabled": bool(date_id),
            "time": await get_time_options(date_id, booking_service=booking_service),
        }
    )
    return response


def _summary_screen(form: dict[str, Any]) -> dict[str, Any]:
    appointment = (
        f"Meeting with {form.get('name') or 'Guest'} "
        f"from {form.get('company') or 'your company'} "
        f"({form.get('website') or 'website not provided'})\n"
        f"{describe_date(form.get('date'))} at {form.get('time')}"
    )
    details = (
        f"Name: {form.get('name')}\n"
        f"Email: {form.get('email')}\n"
        f"Website: {form.get('website')}\n"
        f"Company: {form.get('company')}\n"
        f"\"{form.get('more_details') or ''}\""
    )
    response = _screen("SUMMARY")
    response["data"] = {"appointment": appointment, "details": details, **form}
    return response


async def _success_screen(
    form: dict[str, Any],
    *,
    flow_token: Any,
    booking_service: BookingServiceProtocol,
    time_zone: str,
    time_zone_label: str,
) -> dict[str, Any]:
    confirmation = await _create_booking(form, booking_service=booking_service)

    meeting_time_local: str | None = None
    if confirmation is None:
        message = "We could not create the booking automatically, but your details were received."
    else:
        if confirmation.start is not None:
            meeting_time_local = confirmation.start.astimezone(ZoneInfo(time_zone)).strftime(
                _LOCAL_TIME_FORMAT
            )
        message = "Your meeting is booked."
        if meeting_time_local:
            message += f"\nTime ({time_zone_label}): {meeting_time_local}"
        else:
            message += f"\nTime: {form.get('date')} {form.get('time')}"
        if confirmation.meeting_url:
            message += f"\nMeeting link: {confirmation.meeting_url}"

    response = _screen("SUCCESS")
    response["data"]["extension_message_response"]["params"] = {
        "flow_token": flow_token,
        "confirmation_message": message,
        "booking_id": confirmation.booking_id if confirmation else None,
        "meeting_url": confirmation.meeting_url if confirmation else None,
        "meeting_time_utc": confirmation.raw_start if confirmation else None,
        "meeting_time_ist": meeting_time_local,
        "name": form.get("name"),
        "email": form.get("email"),
        "website": form.get("website"),
        "company": form.get("company"),
        "date": form.get("date"),
        "time": form.get("time"),
    }
    return response


async def _create_booking(
    form: dict[str, Any],
    *,
    booking_service: BookingServiceProtocol,
) -> BookingConfirmation | None:
    try:
        booking = BookingRequest(
            name=form.get("name") or "",
            email=form.get("email") or "",
            date=form.get("date") or "",
            time=form.get("time") or "",
        )
    except ValidationError:
        logger.warning(
            "flow_booking_missing_fields",
            extra={
                "component": "flow_screens",
                "missing": [key for key in ("name", "email", "date", "time") if not form.get(key)],
            },
        )
        return None
    return await booking_service.create_booking(booking)


__all__ = [
    "SCREEN_RESPONSES",
    "UnhandledFlowRequestError",
    "get_next_screen",
    "normalize_form_data",
]
