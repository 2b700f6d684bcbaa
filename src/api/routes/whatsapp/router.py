"""Router do WhatsApp: agrega os endpoints do canal."""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.whatsapp.flows import router as flows_router

router = APIRouter()

# Data exchange de Flows (POST envelope, GET liveness)
router.include_router(flows_router)
