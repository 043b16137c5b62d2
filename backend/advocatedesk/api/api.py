"""
Main API router aggregator
"""
from fastapi import APIRouter

from advocatedesk.api.endpoints import (
    auth,
    backup,
    cases,
    client_portal,
    clients,
    dashboard,
    documents,
    hearings,
    profile,
    system,
    team,
)

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(cases.router, prefix="/cases", tags=["Cases"])
api_router.include_router(clients.router, prefix="/clients", tags=["Clients"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(hearings.router, prefix="/hearings", tags=["Hearings"])
api_router.include_router(team.router, prefix="/team", tags=["Team"])
api_router.include_router(profile.router, prefix="/profile", tags=["Profile"])
api_router.include_router(client_portal.router, prefix="/client", tags=["Client Portal"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(backup.router, prefix="/backup", tags=["Backup"])
api_router.include_router(system.router, prefix="/system", tags=["System"])
