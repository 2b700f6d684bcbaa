"""Modelos de domínio do agendamento feito pelo Flow.

Contratos compartilhados entre o roteamento de telas e o provider de agenda,
sem acoplar as telas a detalhes do Cal.com.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - usado em runtime pelo schema do Pydantic

from pydantic import BaseModel, ConfigDict, Field


class TimeOption(BaseModel):
    """Opção de horário exibida no dropdown da tela APPOINTMENT."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Horário no formato HH:MM.")
    title: str = Field(..., description="Texto exibido ao usuário.")
    enabled: bool | None = Field(default=None, description="Desabilita a opção quando False.")

    def as_flow_option(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class BookingRequest(BaseModel):
    """Campos normalizados do formulário necessários para reservar."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1, description="Data no formato YYYY-MM-DD.")
    time: str = Field(..., min_length=1, description="Horário no formato HH:MM.")


class BookingConfirmation(BaseModel):
    """Reserva confirmada pelo provider."""

    model_config = ConfigDict(extra="ignore")

    booking_id: str | None = Field(default=None)
    meeting_url: str | None = Field(default=None)
    start: datetime | None = Field(default=None, description="Início em UTC.")
    raw_start: str | None = Field(default=None, description="Início como devolvido pela API.")


__all__ = ["BookingConfirmation", "BookingRequest", "TimeOption"]
