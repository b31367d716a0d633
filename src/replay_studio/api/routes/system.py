"""System status endpoints."""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from replay_studio.api.deps import StudioDep
from replay_studio.domain.models import SystemStatus
from replay_studio.logging import get_logger

router = APIRouter(prefix="/system", tags=["System"])
logger = get_logger(__name__)


class SystemStatusResponse(BaseModel):
    """Process-wide status."""

    is_running: bool
    current_task: str
    replays_found: int
    videos_uploaded: int
    replays_discovered: int
    searches_completed: int
    last_activity: datetime | None
    uptime: str

    @classmethod
    def from_domain(cls, system_status: SystemStatus) -> "SystemStatusResponse":
        return cls(
            is_running=system_status.is_running,
            current_task=system_status.current_task,
            replays_found=system_status.replays_found,
            videos_uploaded=system_status.videos_uploaded,
            replays_discovered=system_status.replays_discovered,
            searches_completed=system_status.searches_completed,
            last_activity=system_status.last_activity,
            uptime=system_status.uptime,
        )


@router.get("/status", response_model=SystemStatusResponse, summary="System status")
async def get_status(studio: StudioDep) -> SystemStatusResponse:
    return SystemStatusResponse.from_domain(studio.status)


@router.post(
    "/toggle",
    response_model=SystemStatusResponse,
    summary="Start or stop the system",
    description="Starting also advances the earliest pending job.",
)
async def toggle_system(studio: StudioDep) -> SystemStatusResponse:
    return SystemStatusResponse.from_domain(studio.queue.toggle_system())


@router.post(
    "/reset",
    response_model=SystemStatusResponse,
    summary="Reset session",
    description="Cancel all scheduled work and clear status, replays and jobs.",
)
async def reset_session(studio: StudioDep) -> SystemStatusResponse:
    await studio.reset()
    logger.info("session_reset_requested")
    return SystemStatusResponse.from_domain(studio.status)
