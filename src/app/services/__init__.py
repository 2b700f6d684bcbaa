"""Serviços de aplicação.

Roteamento de telas do Flow e opções de data/horário (sem IO direto).
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.flow_screens import UnhandledFlowRequestError, get_next_screen

__all__ = [
    "UnhandledFlowRequestError",
    "get_next_screen",
]
