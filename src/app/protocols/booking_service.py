"""Contrato do provider de agenda usado pelo Flow de agendamento.

Mantemos apenas o protocolo aqui para permitir troca de provider sem
impactar o roteamento de telas.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.domain.booking import BookingConfirmation, BookingRequest, TimeOption


@runtime_checkable
class BookingServiceProtocol(Protocol):
    """Contrato para disponibilidade e criação de reservas."""

    async def get_time_options(self, date: str) -> list[TimeOption]:
        """Retorna horários para a data; nunca levanta, usa lista estática em falha."""
        ...

    async def create_booking(self, booking: BookingRequest) -> BookingConfirmation | None:
        """Cria a reserva e retorna None quando não foi possível."""
        ...
