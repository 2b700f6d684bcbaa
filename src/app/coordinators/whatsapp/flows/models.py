"""Modelos de coordenação para o endpoint de Flows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class DecryptedFlowData:
    """Campos de roteamento de um request de Flow descriptografado."""

    flow_token: str
    action: str
    screen: str
    data: dict[str, Any]
    version: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> DecryptedFlowData:
        data = payload.get("data")
        version = payload.get("version")
        return cls(
            flow_token=str(payload.get("flow_token") or ""),
            action=str(payload.get("action") or ""),
            screen=str(payload.get("screen") or ""),
            data=data if isinstance(data, dict) else {},
            version=str(version) if version is not None else None,
        )

    def log_fields(self) -> dict[str, object]:
        """Campos seguros para log (sem dados do formulário)."""
        return {
            "flow_action": self.action,
            "flow_screen": self.screen,
            "flow_version": self.version,
            "has_flow_token": bool(self.flow_token),
        }
