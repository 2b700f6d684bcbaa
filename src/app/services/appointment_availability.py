"""Opções de data/horário para a tela APPOINTMENT do Flow."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

if TYPE_CHECKING:
    from app.domain.booking import TimeOption
    from app.protocols.booking_service import BookingServiceProtocol

DATE_OPTION_DAYS = 5
_DATE_TITLE_FORMAT = "%a %b %d %Y"  # ex: "Sun Nov 16 2025"


def format_date_title(value: datetime) -> str:
    return value.strftime(_DATE_TITLE_FORMAT)


def get_date_options(
    *,
    days: int = DATE_OPTION_DAYS,
    time_zone: str = "UTC",
    now: datetime | None = None,
) -> list[dict[str, object]]:
    """Retorna hoje e os próximos dias como opções do dropdown de data.

    `id` segue YYYY-MM-DD e `title` o formato curto em inglês.
    """
    if days <= 0:
        return []
    base = now.astimezone(ZoneInfo(time_zone)) if now else datetime.now(tz=ZoneInfo(time_zone))
    options: list[dict[str, object]] = []
    for step in range(days):
        candidate = base + timedelta(days=step)
        options.append(
            {
                "id": candidate.strftime("%Y-%m-%d"),
                "title": format_date_title(candidate),
            }
        )
    return options


def describe_date(date_id: str | None) -> str | None:
    """Converte YYYY-MM-DD no título legível; devolve o valor original se inválido."""
    if not date_id:
        return date_id
    try:
        return format_date_title(datetime.fromisoformat(date_id))
    except ValueError:
        return date_id


async def get_time_options(
    date_id: str | None,
    *,
    booking_service: BookingServiceProtocol,
) -> list[dict[str, object]]:
    """Horários da data escolhida; sem data, lista vazia."""
    if not date_id:
        return []
    options: list[TimeOption] = await booking_service.get_time_options(date_id)
    return [option.as_flow_option() for option in options]


__all__ = [
    "DATE_OPTION_DAYS",
    "describe_date",
    "format_date_title",
    "get_date_options",
    "get_time_options",
]
