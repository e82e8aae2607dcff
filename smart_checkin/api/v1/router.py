"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from smart_checkin.api.v1.endpoints import checkin, maintenance, reservations, webauthn

api_router = APIRouter()

# Include sub-routers
api_router.include_router(webauthn.router, prefix="/webauthn", tags=["WebAuthn"])
api_router.include_router(checkin.router, prefix="/checkin", tags=["Check-in"])
api_router.include_router(reservations.router, prefix="/reservations", tags=["Reservations"])
api_router.include_router(maintenance.router, prefix="/maintenance", tags=["Maintenance"])
