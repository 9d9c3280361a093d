"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..dependencies import ServiceContainer, get_container

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    store: str
    database: str


@router.get("/health", response_model=HealthResponse)
async def health_check(container: ServiceContainer = Depends(get_container)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=container.settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(container: ServiceContainer = Depends(get_container)):
    """
    Readiness check endpoint.

    Ready when the principal store is usable: the in-memory store always is,
    the Supabase store once its client has been opened.
    """
    if not container.uses_database:
        return ReadinessResponse(status="ready", store=container.settings.store_backend, database="not used")

    if container.database.is_open:
        return ReadinessResponse(status="ready", store="supabase", database="connected")

    body = ReadinessResponse(status="not ready", store="supabase", database="disconnected")
    return JSONResponse(status_code=503, content=body.model_dump())
