"""Client concreto do Cal.com (API v2) para o Flow de agendamento."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

import httpx

from app.domain.booking import BookingConfirmation, BookingRequest, TimeOption
from app.observability import get_correlation_id
from app.protocols.booking_service import BookingServiceProtocol
from config.logging import log_fallback

if TYPE_CHECKING:
    from config.settings.booking import BookingSettings

logger = logging.getLogger(__name__)

_COMPONENT = "cal_com_client"

# Lista usada quando o Cal.com não está configurado ou falha
STATIC_TIME_OPTIONS: tuple[TimeOption, ...] = (
    TimeOption(id="10:30", title="10:30"),
    TimeOption(id="11:00", title="11:00", enabled=False),
    TimeOption(id="11:30", title="11:30"),
    TimeOption(id="12:00", title="12:00", enabled=False),
    TimeOption(id="12:30", title="12:30"),
)


def static_time_options() -> list[TimeOption]:
    return [option.model_copy() for option in STATIC_TIME_OPTIONS]


class CalComBookingClient(BookingServiceProtocol):
    """Implementação do protocolo de agenda usando Cal.com v2.

    Falhas do provider nunca quebram o Flow: horários caem para a lista
    estática e a reserva retorna None.
    """

    __slots__ = ("_settings", "_transport", "_zone")

    def __init__(
        self,
        settings: BookingSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._zone = ZoneInfo(settings.time_zone)
        self._transport = transport

    async def get_time_options(self, date: str) -> list[TimeOption]:
        if not self._settings.enabled:
            logger.warning(
                "cal_com_not_configured",
                extra={"component": _COMPONENT, "action": "get_time_options"},
            )
            return static_time_options()

        params: dict[str, Any] = {
            "eventTypeId": self._settings.cal_event_type_id,
            "start": date,
            "end": date,
            "timeZone": self._settings.time_zone,
            "format": "time",
        }
        headers = {
            "Authorization": f"Bearer {self._settings.cal_api_key}",
            "cal-api-version": self._settings.slots_api_version,
        }
        try:
            async with self._client() as client:
                response = await client.get("/slots", params=params, headers=headers)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            self._log_error(action="get_time_options", exc=exc)
            log_fallback(logger, "time_options", reason="provider_error")
            return static_time_options()

        options = _map_slots(body, date)
        if not options:
            logger.info(
                "cal_com_no_slots",
                extra={"component": _COMPONENT, "action": "get_time_options", "date": date},
            )
            log_fallback(logger, "time_options", reason="no_slots")
            return static_time_options()
        return options

    async def create_booking(self, booking: BookingRequest) -> BookingConfirmation | None:
        if not self._settings.enabled:
            logger.warning(
                "cal_com_not_configured",
                extra={"component": _COMPONENT, "action": "create_booking"},
            )
            return None

        try:
            start = datetime.fromisoformat(f"{booking.date}T{booking.time}").replace(
                tzinfo=self._zone
            )
        except ValueError:
            logger.warning(
                "cal_com_invalid_booking_time",
                extra={"component": _COMPONENT, "action": "create_booking"},
            )
            return None

        payload = {
            "start": start.isoformat(timespec="milliseconds"),
            "attendee": {
                "name": booking.name,
                "email": booking.email,
                "timeZone": self._settings.time_zone,
            },
            "eventTypeId": self._settings.cal_event_type_id,
        }
        headers = {
            "Content-Type": "application/json",
            "cal-api-version": self._settings.booking_api_version,
        }
        try:
            async with self._client() as client:
                response = await client.post(
                    "/bookings",
                    json=payload,
                    params={"apiKey": self._settings.cal_api_key},
                    headers=headers,
                )
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            self._log_error(action="create_booking", exc=exc)
            return None

        confirmation = _map_booking(body)
        logger.info(
            "cal_com_booking_result",
            extra={
                "component": _COMPONENT,
                "action": "create_booking",
                "result": "created" if confirmation else "rejected",
                "correlation_id": get_correlation_id(),
            },
        )
        return confirmation

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.cal_api_base_url,
            timeout=self._settings.request_timeout_seconds,
            transport=self._transport,
        )

    def _log_error(self, *, action: str, exc: Exception) -> None:
        extra: dict[str, object] = {
            "component": _COMPONENT,
            "action": action,
            "result": "error",
            "error_type": type(exc).__name__,
            "correlation_id": get_correlation_id(),
        }
        if isinstance(exc, httpx.HTTPStatusError):
            extra["status_code"] = exc.response.status_code
        logger.error("cal_com_request_failed", extra=extra)


def _map_slots(body: Any, date: str) -> list[TimeOption]:
    """Converte resposta de /slots em opções HH:MM.

    Tenta a chave exata da data e, na ausência, a primeira chave retornada.
    """
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, dict) or not data:
        return []
    slots = data.get(date)
    if not slots:
        slots = next(iter(data.values()), [])
    options: list[TimeOption] = []
    for slot in slots or []:
        start = slot.get("start") if isinstance(slot, dict) else None
        if not isinstance(start, str) or "T" not in start:
            continue
        hhmm = start.split("T", 1)[1][:5]
        options.append(TimeOption(id=hhmm, title=hhmm))
    return options


def _map_booking(body: Any) -> BookingConfirmation | None:
    if not isinstance(body, dict) or body.get("status") != "success":
        return None
    data = body.get("data")
    if not isinstance(data, dict):
        return None
    raw_start = data.get("start")
    start: datetime | None = None
    if isinstance(raw_start, str):
        try:
            start = datetime.fromisoformat(raw_start.replace("Z", "+00:00"))
        except ValueError:
            start = None
    booking_id = data.get("id")
    return BookingConfirmation(
        booking_id=str(booking_id) if booking_id is not None else None,
        meeting_url=data.get("meetingUrl") or data.get("location") or None,
        start=start,
        raw_start=raw_start if isinstance(raw_start, str) else None,
    )


__all__ = ["STATIC_TIME_OPTIONS", "CalComBookingClient", "static_time_options"]
