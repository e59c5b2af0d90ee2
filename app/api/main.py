"""API router setup."""
from fastapi import APIRouter

from app.api.routes import (
    agenda,
    clients,
    dashboard,
    professionals,
    reports,
    specialties,
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(agenda.router)
api_router.include_router(clients.router)
api_router.include_router(dashboard.router)
api_router.include_router(professionals.router)
api_router.include_router(reports.router)
api_router.include_router(specialties.router)
