"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from medgestor.config import settings
from medgestor.database import check_database_connection

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Health check response including the database status."""

    database: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        Basic health status
    """
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Detailed health check",
)
async def detailed_health_check() -> DetailedHealthResponse:
    """Health check that also pings the database."""
    db_healthy = await check_database_connection()

    return DetailedHealthResponse(
        status="healthy" if db_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
    )


@router.get(
    "/ping",
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Simple ping",
)
async def ping() -> dict[str, str]:
    """Simple ping endpoint."""
    return {"message": "pong"}
