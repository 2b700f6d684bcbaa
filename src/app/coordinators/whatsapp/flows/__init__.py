"""Coordenação do endpoint de data exchange de Flows."""

from app.coordinators.whatsapp.flows.handler import (
    FlowEndpointHandler,
    create_flow_endpoint_handler,
)
from app.coordinators.whatsapp.flows.models import DecryptedFlowData

__all__ = ["DecryptedFlowData", "FlowEndpointHandler", "create_flow_endpoint_handler"]
