# familyhub/api/api.py
from fastapi import APIRouter

from familyhub.api.routes import (
    security,
    calendar_events,
    travel,
    health,
    pets,
    academics,
    portals,
    documents,
    sync_audit,
)

api_router = APIRouter()
api_router.include_router(security.router, prefix="/security", tags=["security"])
api_router.include_router(
    calendar_events.router, prefix="/calendar-events", tags=["calendar_events"]
)
api_router.include_router(travel.router, prefix="/travel-details", tags=["travel"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(pets.router, prefix="/pets", tags=["pets"])
api_router.include_router(
    academics.router, prefix="/academic-events", tags=["academics"]
)
api_router.include_router(portals.router, prefix="/portals", tags=["portals"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
api_router.include_router(sync_audit.router, prefix="/sync-audit", tags=["sync_audit"])
