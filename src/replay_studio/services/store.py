"""Read path that rehydrates a studio session from the external store."""

from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from replay_studio.db.models import ReplayModel, SystemStatusModel, UploadJobModel
from replay_studio.domain.enums import JobStatus
from replay_studio.domain.models import (
    DEFAULT_THUMBNAIL,
    IDLE_TASK,
    Job,
    Replay,
    SystemStatus,
    format_duration,
    format_file_size,
    kda_ratio,
    parse_kda,
)
from replay_studio.logging import get_logger

logger = get_logger(__name__)

INTERRUPTED_STEP = "Interrupted before completion"


@dataclass
class StoredState:
    """Everything a session needs from the store at startup."""

    status: SystemStatus | None = None
    replays: list[Replay] = field(default_factory=list)
    jobs: list[Job] = field(default_factory=list)


def _replay_from_row(row: ReplayModel) -> Replay:
    kda = row.kda or "0/0/0"
    try:
        ratio = kda_ratio(*parse_kda(kda))
    except ValueError:
        ratio = 0.0
    return Replay(
        id=str(row.id),
        player=row.player_name,
        champion=row.champion,
        rank=row.rank_tier or "Unranked",
        kda=kda,
        kda_ratio=ratio,
        duration_seconds=row.duration or 0,
        game_mode=row.game_mode or "Unknown",
        patch=row.patch_version or "Unknown",
        download_url=row.download_url or "#",
    )


def _job_from_row(row: UploadJobModel, replays: dict[str, Replay]) -> Job:
    try:
        status = JobStatus(row.status or JobStatus.PENDING)
    except ValueError:
        logger.warning("stored_job_status_unknown", job_id=str(row.id), status=row.status)
        status = JobStatus.FAILED

    error_message = row.error_message
    if status in (JobStatus.PROCESSING, JobStatus.UPLOADING):
        # Work in flight when the store was written cannot be resumed
        status = JobStatus.FAILED
        error_message = error_message or INTERRUPTED_STEP

    replay = replays.get(str(row.replay_id)) if row.replay_id else None
    return Job(
        id=str(row.id),
        title=row.title,
        player=row.player_name,
        champion=row.champion,
        status=status,
        progress=row.progress or 0,
        duration=format_duration(row.duration or 0),
        file_size=format_file_size(row.file_size or 0),
        thumbnail=row.thumbnail_url or DEFAULT_THUMBNAIL,
        estimated_time=(
            f"{row.estimated_time} min remaining" if row.estimated_time else "Unknown"
        ),
        video_url=row.youtube_url,
        current_step=error_message,
        replay=replay,
        recording_settings=replay.recording_settings() if replay else {},
        created_at=row.created_at,
    )


def _status_from_row(row: SystemStatusModel) -> SystemStatus:
    # A stored running flag is not resumed: no scheduled work survives a restart
    return SystemStatus(
        is_running=False,
        current_task=IDLE_TASK,
        replays_found=row.replays_found or 0,
        videos_uploaded=row.videos_uploaded or 0,
        last_activity=row.last_activity,
        uptime_seconds=float((row.uptime or 0) * 60),
    )


def load_snapshot(db: Session, user_id: UUID) -> StoredState:
    """Load a user's stored status, replays (newest first) and jobs (queue order)."""
    status_row = db.execute(
        select(SystemStatusModel).where(SystemStatusModel.user_id == user_id)
    ).scalar_one_or_none()

    replay_rows = (
        db.execute(
            select(ReplayModel)
            .where(ReplayModel.user_id == user_id)
            .order_by(ReplayModel.created_at.desc())
        )
        .scalars()
        .all()
    )
    job_rows = (
        db.execute(
            select(UploadJobModel)
            .where(UploadJobModel.user_id == user_id)
            .order_by(UploadJobModel.created_at.asc())
        )
        .scalars()
        .all()
    )

    replays = [_replay_from_row(row) for row in replay_rows]
    by_id = {replay.id: replay for replay in replays}
    jobs = [_job_from_row(row, by_id) for row in job_rows]

    logger.info(
        "stored_state_loaded",
        user_id=str(user_id),
        has_status=status_row is not None,
        replays=len(replays),
        jobs=len(jobs),
    )
    return StoredState(
        status=_status_from_row(status_row) if status_row else None,
        replays=replays,
        jobs=jobs,
    )
