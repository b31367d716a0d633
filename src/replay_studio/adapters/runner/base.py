"""Base interface for job runners.

A runner performs the real work behind a queued job (recording the replay,
encoding it, uploading the video) and reports progress as it goes. The queue
manager owns every status change; runners only report.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from replay_studio.domain.enums import JobStatus
from replay_studio.domain.models import Job

# (status, progress, step description)
ProgressReporter = Callable[[JobStatus, int, str], Awaitable[None]]


class JobRunner(ABC):
    """Abstract base class for job runners.

    Implementations:
    - SimulatedJobRunner: Advances progress on a fixed schedule
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Runner name identifier."""
        ...

    @abstractmethod
    async def run(self, job: Job, report: ProgressReporter) -> str:
        """Record and publish a job.

        Args:
            job: The job to run (already in ``processing`` at progress 0)
            report: Callback for intermediate ``processing``/``uploading`` progress

        Returns:
            URL of the published video

        Raises:
            Exception: Any error fails the job with the error text as its step
        """
        ...

    async def health_check(self) -> bool:
        """Check if the runner is available.

        Returns:
            True if runner is operational
        """
        return True
