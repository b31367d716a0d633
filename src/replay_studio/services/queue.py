"""Upload job queue and job lifecycle."""

import asyncio
from dataclasses import dataclass

from replay_studio.adapters.runner.base import JobRunner
from replay_studio.domain.enums import JobStatus
from replay_studio.domain.models import DEFAULT_FILE_SIZE, Job, Replay, SystemStatus
from replay_studio.logging import get_logger
from replay_studio.services.scheduler import SchedulerClosedError, TaskScheduler

logger = get_logger(__name__)

SUCCESS_PATH = (
    JobStatus.PENDING,
    JobStatus.PROCESSING,
    JobStatus.UPLOADING,
    JobStatus.COMPLETED,
)
PLACEHOLDER_VIDEO_URL = "https://youtube.com/watch?v=example"
STOPPED_BY_USER = "Stopped by user"


class InvalidTransitionError(ValueError):
    """Raised when a job is moved to a status its current status cannot reach."""


def is_allowed_transition(current: JobStatus, target: JobStatus) -> bool:
    """Check a status change against the job state machine.

    pending -> processing -> uploading -> completed, forward skips allowed;
    processing and uploading accept progress updates in place; any
    non-terminal status may fail; failed and completed restart into
    processing.
    """
    if target == JobStatus.FAILED:
        return not current.is_terminal
    if current.is_terminal:
        return target == JobStatus.PROCESSING

    current_index = SUCCESS_PATH.index(current)
    target_index = SUCCESS_PATH.index(target)
    if target_index == current_index:
        return current in (JobStatus.PROCESSING, JobStatus.UPLOADING)
    return target_index > current_index


def _clamp_progress(progress: int) -> int:
    return max(0, min(100, int(progress)))


@dataclass
class QueueStats:
    """Queue-level counts, computed from the jobs on every read."""

    total: int
    pending: int
    processing_or_uploading: int
    completed: int
    failed: int


class JobQueueManager:
    """Owns the ordered job list and every job status change.

    Unknown job ids are a silent no-op for every mutation: ``transition``,
    ``start``, ``stop`` and ``restart`` return None and ``remove`` returns
    False.
    """

    def __init__(
        self,
        jobs: list[Job],
        status: SystemStatus,
        scheduler: TaskScheduler,
        runner: JobRunner,
        default_file_size: str = DEFAULT_FILE_SIZE,
    ) -> None:
        self.jobs = jobs
        self.status = status
        self.scheduler = scheduler
        self.runner = runner
        self.default_file_size = default_file_size

    @staticmethod
    def _task_key(job_id: str) -> str:
        return f"job:{job_id}"

    def get(self, job_id: str) -> Job | None:
        return next((job for job in self.jobs if job.id == job_id), None)

    def enqueue(self, replay: Replay) -> Job:
        """Create a pending job for a replay and append it to the queue."""
        job = Job.from_replay(replay, file_size=self.default_file_size)
        self.jobs.append(job)

        self.status.replays_found += 1
        self.status.touch()

        logger.info(
            "job_enqueued",
            job_id=job.id,
            replay_id=replay.id,
            title=job.title,
            fog_of_war=replay.fog_of_war,
        )
        return job

    def transition(
        self,
        job_id: str,
        status: JobStatus,
        progress: int | None = None,
        *,
        step: str | None = None,
        video_url: str | None = None,
    ) -> Job | None:
        """Move a job to a new status.

        Args:
            job_id: Job to change
            status: Target status
            progress: New progress; never lowers progress along the success path
            step: Current step text (the failure reason when failing)
            video_url: Published video, attached on completion

        Returns:
            The updated job, or None if the id is unknown

        Raises:
            InvalidTransitionError: If the state machine forbids the change
        """
        job = self.get(job_id)
        if job is None:
            logger.warning("job_not_found", job_id=job_id, action="transition")
            return None

        status = JobStatus(status)
        previous = job.status
        if not is_allowed_transition(previous, status):
            raise InvalidTransitionError(f"Cannot move job {job_id} from {previous} to {status}")

        job.status = status

        if previous.is_terminal:
            # Restart
            job.progress = 0
            job.video_url = None
            job.estimated_time = "Queued"
            job.current_step = step
        elif status == JobStatus.COMPLETED:
            job.progress = 100
            job.estimated_time = "Completed"
            job.video_url = video_url or job.video_url or PLACEHOLDER_VIDEO_URL
            job.current_step = step or "Published"
            self.status.videos_uploaded += 1
            self.status.touch()
        elif status == JobStatus.FAILED:
            job.current_step = step or "Failed"
        else:
            if progress is not None:
                job.progress = max(job.progress, _clamp_progress(progress))
            if step is not None:
                job.current_step = step

        if status in (JobStatus.COMPLETED, JobStatus.FAILED):
            # Outside changes end any runner still working on the job
            self.scheduler.cancel(self._task_key(job_id))

        logger.info(
            "job_transitioned",
            job_id=job_id,
            previous=previous,
            status=status,
            progress=job.progress,
        )
        return job

    def remove(self, job_id: str) -> bool:
        """Delete a job regardless of its status.

        Returns:
            True if a job was removed, False if the id is unknown
        """
        job = self.get(job_id)
        if job is None:
            logger.debug("job_not_found", job_id=job_id, action="remove")
            return False

        self.scheduler.cancel(self._task_key(job_id))
        self.jobs.remove(job)
        logger.info("job_removed", job_id=job_id)
        return True

    def start(self, job_id: str) -> Job | None:
        """Start a pending job, or re-run a finished one, on the runner.

        Must be called from a running event loop.

        Raises:
            InvalidTransitionError: If the job is already processing or uploading
            SchedulerClosedError: If the session has been closed
        """
        if self.scheduler.closed:
            raise SchedulerClosedError(f"Cannot start job {job_id}: session is closed")

        job = self.get(job_id)
        if job is None:
            logger.warning("job_not_found", job_id=job_id, action="start")
            return None
        if job.status in (JobStatus.PROCESSING, JobStatus.UPLOADING):
            raise InvalidTransitionError(f"Job {job_id} is already {job.status}")

        self.transition(job_id, JobStatus.PROCESSING, 0, step="Starting")
        self.scheduler.spawn(self._task_key(job_id), self._run(job))
        return job

    def restart(self, job_id: str) -> Job | None:
        """Re-run a failed or completed job from progress 0.

        Raises:
            InvalidTransitionError: If the job has not finished
        """
        job = self.get(job_id)
        if job is None:
            logger.warning("job_not_found", job_id=job_id, action="restart")
            return None
        if not job.status.is_terminal:
            raise InvalidTransitionError(f"Job {job_id} is {job.status}, not failed or completed")
        return self.start(job_id)

    def stop(self, job_id: str, reason: str = STOPPED_BY_USER) -> Job | None:
        """Cancel a job's work and mark it failed.

        Raises:
            InvalidTransitionError: If the job already completed or failed
        """
        return self.transition(job_id, JobStatus.FAILED, step=reason)

    async def _run(self, job: Job) -> None:
        async def report(status: JobStatus, progress: int, step: str) -> None:
            if job.status.is_terminal or not is_allowed_transition(job.status, status):
                logger.warning(
                    "job_progress_ignored", job_id=job.id, status=job.status, reported=status
                )
                return
            self.transition(job.id, status, progress, step=step)

        try:
            video_url = await self.runner.run(job, report)
        except asyncio.CancelledError:
            logger.info("job_run_cancelled", job_id=job.id)
            raise
        except Exception as e:
            logger.error("job_run_failed", job_id=job.id, error=str(e))
            if self.get(job.id) is not None and not job.status.is_terminal:
                self.transition(job.id, JobStatus.FAILED, step=str(e))
            return

        if self.get(job.id) is None or job.status.is_terminal:
            logger.warning("job_run_result_ignored", job_id=job.id, status=job.status)
            return
        self.transition(job.id, JobStatus.COMPLETED, 100, video_url=video_url)

    def toggle_system(self) -> SystemStatus:
        """Start or stop the system.

        Starting advances exactly one job, the earliest pending one, through
        the runner. Stopping does not interrupt jobs already running.
        """
        if self.status.is_running:
            self.status.stop()
            logger.info("system_stopped", uptime=self.status.uptime)
            return self.status

        self.status.start()
        pending = next((job for job in self.jobs if job.status == JobStatus.PENDING), None)
        logger.info("system_started", auto_start_job=pending.id if pending else None)
        if pending is not None:
            self.start(pending.id)
        return self.status

    @property
    def completed_count(self) -> int:
        return sum(1 for job in self.jobs if job.status == JobStatus.COMPLETED)

    @property
    def pending_count(self) -> int:
        return sum(1 for job in self.jobs if job.status == JobStatus.PENDING)

    @property
    def processing_or_uploading_count(self) -> int:
        return sum(
            1 for job in self.jobs if job.status in (JobStatus.PROCESSING, JobStatus.UPLOADING)
        )

    def stats(self) -> QueueStats:
        return QueueStats(
            total=len(self.jobs),
            pending=self.pending_count,
            processing_or_uploading=self.processing_or_uploading_count,
            completed=self.completed_count,
            failed=sum(1 for job in self.jobs if job.status == JobStatus.FAILED),
        )
