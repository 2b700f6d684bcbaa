"""Settings de integração com Cal.com (agendamento do Flow).

Sem `CAL_API_KEY` o Flow continua funcionando com a lista estática de
horários e sem criar reservas.
"""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field

CAL_API_BASE_URL = "https://api.cal.com/v2"
CAL_SLOTS_API_VERSION = "2024-09-04"
CAL_BOOKING_API_VERSION = "2024-08-13"


class BookingSettings(BaseModel):
    """Configurações do provider de agenda usado na tela SUMMARY."""

    model_config = ConfigDict(extra="ignore")

    cal_api_key: str = Field(default="", description="API key do Cal.com.")
    cal_event_type_id: int | None = Field(
        default=None,
        description="Tipo de evento onde as reservas são criadas.",
    )
    cal_api_base_url: str = Field(default=CAL_API_BASE_URL, description="URL base da API v2.")
    slots_api_version: str = Field(default=CAL_SLOTS_API_VERSION)
    booking_api_version: str = Field(default=CAL_BOOKING_API_VERSION)
    time_zone: str = Field(
        default="Asia/Kolkata",
        description="Timezone das ofertas de horário e da confirmação.",
    )
    time_zone_label: str = Field(
        default="IST",
        description="Rótulo curto do timezone exibido ao usuário.",
    )
    request_timeout_seconds: float = Field(default=15.0, gt=0)

    @property
    def enabled(self) -> bool:
        return bool(self.cal_api_key)

    def validate_settings(self) -> list[str]:
        """Retorna erros de configuração (vazia = OK)."""
        errors: list[str] = []
        if self.cal_api_key and self.cal_event_type_id is None:
            errors.append("CAL_EVENT_TYPE_ID obrigatório quando CAL_API_KEY está definido")
        return errors


def _read_optional_int(key: str) -> int | None:
    raw_value = os.getenv(key, "").strip()
    return int(raw_value) if raw_value else None


def _load_booking_from_env() -> BookingSettings:
    """Carrega BookingSettings a partir de variáveis de ambiente."""
    return BookingSettings(
        cal_api_key=os.getenv("CAL_API_KEY", ""),
        cal_event_type_id=_read_optional_int("CAL_EVENT_TYPE_ID"),
        cal_api_base_url=os.getenv("CAL_API_BASE_URL", CAL_API_BASE_URL),
        time_zone=os.getenv("CAL_TIME_ZONE", "Asia/Kolkata"),
        time_zone_label=os.getenv("CAL_TIME_ZONE_LABEL", "IST"),
        request_timeout_seconds=float(os.getenv("CAL_REQUEST_TIMEOUT_SECONDS", "15")),
    )


@lru_cache(maxsize=1)
def get_booking_settings() -> BookingSettings:
    """Retorna instância cacheada de BookingSettings."""
    return _load_booking_from_env()


__all__ = ["BookingSettings", "get_booking_settings"]
