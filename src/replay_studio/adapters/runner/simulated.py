"""Simulated job runner that advances progress on a fixed schedule."""

import asyncio
from uuid import uuid4

from replay_studio.adapters.runner.base import JobRunner, ProgressReporter
from replay_studio.domain.enums import JobStatus
from replay_studio.domain.models import Job
from replay_studio.logging import get_logger

logger = get_logger(__name__)

# Uploading starts once processing reaches 75%.
SIMULATED_STEPS: tuple[tuple[JobStatus, int, str], ...] = (
    (JobStatus.PROCESSING, 30, "Recording replay"),
    (JobStatus.PROCESSING, 60, "Encoding video"),
    (JobStatus.UPLOADING, 75, "Uploading video"),
    (JobStatus.UPLOADING, 90, "Finalizing upload"),
)


class SimulatedJobRunner(JobRunner):
    """Runner that simulates recording and upload without external calls."""

    def __init__(self, step_delay: float = 1.0) -> None:
        self.step_delay = step_delay

    @property
    def name(self) -> str:
        return "simulated"

    async def run(self, job: Job, report: ProgressReporter) -> str:
        logger.info("simulated_job_started", job_id=job.id, title=job.title)

        for status, progress, step in SIMULATED_STEPS:
            await asyncio.sleep(self.step_delay)
            await report(status, progress, step)

        await asyncio.sleep(self.step_delay)
        video_url = f"https://youtube.com/watch?v={uuid4().hex[:11]}"

        logger.info("simulated_job_published", job_id=job.id, video_url=video_url)
        return video_url
