"""Health check endpoints."""

import asyncio

from fastapi import APIRouter, status
from pydantic import BaseModel

from replay_studio.api.deps import StudioDep
from replay_studio.config import settings
from replay_studio.logging import get_logger

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, bool] | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    database: bool | None = None
    components: dict[str, bool] | None = None


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint that verifies the API is running.",
)
async def health_check() -> HealthResponse:
    """Basic health check - is the API up?

    Reports which providers are configured with live (non-stub) implementations.
    """
    from replay_studio import __version__

    return HealthResponse(
        status="healthy",
        version=__version__,
        components={
            "discovery": settings.discovery_provider != "stub",
            "job_runner": settings.job_runner_provider != "simulated",
            "persistence": settings.persistence_enabled,
        },
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Readiness check that verifies the discovery source, runner and store.",
)
async def readiness_check(studio: StudioDep) -> ReadinessResponse:
    """Comprehensive readiness check including dependencies."""
    database_ok: bool | None = None
    if settings.persistence_enabled:
        database_ok = False
        try:
            from replay_studio.db.session import check_connection

            database_ok = await asyncio.to_thread(check_connection)
        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))

    components = {
        "discovery": await studio.discovery.source.health_check(),
        "job_runner": await studio.queue.runner.health_check(),
        "scheduler": not studio.scheduler.closed,
    }

    ready = database_ok is not False and all(components.values())

    return ReadinessResponse(ready=ready, database=database_ok, components=components)


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Simple liveness probe for Kubernetes.",
)
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe - is the process alive?"""
    return {"status": "alive"}
