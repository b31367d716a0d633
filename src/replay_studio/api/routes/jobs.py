"""Upload job queue endpoints."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from replay_studio.api.deps import StudioDep
from replay_studio.domain.enums import JobStatus
from replay_studio.domain.models import Job
from replay_studio.logging import get_logger
from replay_studio.services.queue import STOPPED_BY_USER, InvalidTransitionError

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = get_logger(__name__)


class JobResponse(BaseModel):
    """An upload job."""

    id: str
    title: str
    player: str
    champion: str
    status: JobStatus
    progress: int
    duration: str
    file_size: str
    thumbnail: str
    estimated_time: str
    video_url: str | None = None
    current_step: str | None = None
    replay_id: str | None = None
    recording_settings: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, job: Job) -> "JobResponse":
        return cls(
            id=job.id,
            title=job.title,
            player=job.player,
            champion=job.champion,
            status=job.status,
            progress=job.progress,
            duration=job.duration,
            file_size=job.file_size,
            thumbnail=job.thumbnail,
            estimated_time=job.estimated_time,
            video_url=job.video_url,
            current_step=job.current_step,
            replay_id=job.replay.id if job.replay else None,
            recording_settings=job.recording_settings,
            created_at=job.created_at,
        )


class QueueStatsResponse(BaseModel):
    """Queue-level counts."""

    total: int
    pending: int
    processing_or_uploading: int
    completed: int
    failed: int


class EnqueueRequest(BaseModel):
    """Request to queue a discovered replay."""

    replay_id: str = Field(..., min_length=1)


class TransitionRequest(BaseModel):
    """Request to move a job to another status."""

    status: JobStatus
    progress: int | None = Field(None, ge=0, le=100)
    step: str | None = Field(None, max_length=255)


class StopRequest(BaseModel):
    """Request to stop a job."""

    reason: str = Field(default=STOPPED_BY_USER, min_length=1, max_length=255)


def _not_found(job_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Job {job_id} not found")


def _conflict(error: InvalidTransitionError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))


@router.get(
    "",
    response_model=list[JobResponse],
    summary="List jobs",
    description="All jobs in queue order.",
)
async def list_jobs(studio: StudioDep) -> list[JobResponse]:
    return [JobResponse.from_domain(job) for job in studio.jobs]


@router.get(
    "/stats",
    response_model=QueueStatsResponse,
    summary="Queue counts",
)
async def queue_stats(studio: StudioDep) -> QueueStatsResponse:
    stats = studio.queue.stats()
    return QueueStatsResponse(
        total=stats.total,
        pending=stats.pending,
        processing_or_uploading=stats.processing_or_uploading,
        completed=stats.completed,
        failed=stats.failed,
    )


@router.post(
    "",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Queue a replay",
    description="Create a pending upload job for a discovered replay.",
)
async def enqueue_replay(request: EnqueueRequest, studio: StudioDep) -> JobResponse:
    replay = studio.find_replay(request.replay_id)
    if replay is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Replay {request.replay_id} not found",
        )

    job = studio.queue.enqueue(replay)
    return JobResponse.from_domain(job)


@router.get(
    "/{job_id}",
    response_model=JobResponse,
    summary="Get job",
)
async def get_job(job_id: str, studio: StudioDep) -> JobResponse:
    job = studio.queue.get(job_id)
    if job is None:
        raise _not_found(job_id)
    return JobResponse.from_domain(job)


@router.post(
    "/{job_id}/start",
    response_model=JobResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start job",
    description="Start recording and uploading a pending job.",
)
async def start_job(job_id: str, studio: StudioDep) -> JobResponse:
    try:
        job = studio.queue.start(job_id)
    except InvalidTransitionError as e:
        raise _conflict(e)
    if job is None:
        raise _not_found(job_id)
    return JobResponse.from_domain(job)


@router.post(
    "/{job_id}/stop",
    response_model=JobResponse,
    summary="Stop job",
    description="Cancel a job's work and mark it failed.",
)
async def stop_job(
    job_id: str, studio: StudioDep, request: StopRequest | None = None
) -> JobResponse:
    reason = request.reason if request else STOPPED_BY_USER
    try:
        job = studio.queue.stop(job_id, reason=reason)
    except InvalidTransitionError as e:
        raise _conflict(e)
    if job is None:
        raise _not_found(job_id)
    return JobResponse.from_domain(job)


@router.post(
    "/{job_id}/restart",
    response_model=JobResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Restart job",
    description="Re-run a failed or completed job from progress 0.",
)
async def restart_job(job_id: str, studio: StudioDep) -> JobResponse:
    try:
        job = studio.queue.restart(job_id)
    except InvalidTransitionError as e:
        raise _conflict(e)
    if job is None:
        raise _not_found(job_id)
    return JobResponse.from_domain(job)


@router.post(
    "/{job_id}/transition",
    response_model=JobResponse,
    summary="Transition job",
    description="Apply a status change (and optional progress) to one job.",
)
async def transition_job(
    job_id: str, request: TransitionRequest, studio: StudioDep
) -> JobResponse:
    try:
        job = studio.queue.transition(job_id, request.status, request.progress, step=request.step)
    except InvalidTransitionError as e:
        raise _conflict(e)
    if job is None:
        raise _not_found(job_id)
    return JobResponse.from_domain(job)


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove job",
    description="Delete a job. Removing an unknown job is not an error.",
)
async def remove_job(job_id: str, studio: StudioDep) -> Response:
    studio.queue.remove(job_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
