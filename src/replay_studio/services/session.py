"""Studio session: the single owner of status, replays, jobs and scheduled work."""

from replay_studio.adapters.discovery import (
    DiscoverySource,
    MockReplayGenerator,
    get_discovery_source,
)
from replay_studio.adapters.runner import JobRunner, get_job_runner
from replay_studio.config import Settings, get_settings
from replay_studio.domain.enums import DedupePolicy
from replay_studio.domain.models import Job, Replay, SystemStatus
from replay_studio.logging import get_logger
from replay_studio.services.discovery import DiscoveryEngine
from replay_studio.services.queue import JobQueueManager
from replay_studio.services.scheduler import TaskScheduler
from replay_studio.services.store import StoredState

logger = get_logger(__name__)


class StudioSession:
    """Wires the discovery engine and the job queue to one shared state.

    Lifecycle: created idle at session start, optionally hydrated from the
    store, reset on sign-out, closed on shutdown. Both ``reset`` and
    ``close`` cancel every scheduled callback (continuous discovery and job
    runners) before anything else changes.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        source: DiscoverySource | None = None,
        runner: JobRunner | None = None,
        generator: MockReplayGenerator | None = None,
    ) -> None:
        settings = settings or get_settings()

        self.status = SystemStatus()
        self.replays: list[Replay] = []
        self.jobs: list[Job] = []
        self.scheduler = TaskScheduler()

        self.discovery = DiscoveryEngine(
            source=source or get_discovery_source(settings),
            status=self.status,
            replays=self.replays,
            scheduler=self.scheduler,
            generator=generator,
            dedupe_policy=DedupePolicy(settings.discovery_dedupe_policy),
            continuous_interval=settings.continuous_search_interval_seconds,
            default_patch=settings.default_patch,
        )
        self.queue = JobQueueManager(
            jobs=self.jobs,
            status=self.status,
            scheduler=self.scheduler,
            runner=runner or get_job_runner(settings),
            default_file_size=settings.default_file_size,
        )

        logger.info(
            "studio_session_initialized",
            discovery_source=self.discovery.source.name,
            job_runner=self.queue.runner.name,
            dedupe_policy=self.discovery.dedupe_policy,
        )

    def find_replay(self, replay_id: str) -> Replay | None:
        return next((r for r in self.replays if r.id == replay_id), None)

    def hydrate(self, state: StoredState) -> None:
        """Replace the in-memory state with what the store holds."""
        if state.status is not None:
            self.status.reset()
            self.status.current_task = state.status.current_task
            self.status.replays_found = state.status.replays_found
            self.status.videos_uploaded = state.status.videos_uploaded
            self.status.last_activity = state.status.last_activity
            self.status.uptime_seconds = state.status.uptime_seconds
        self.replays[:] = state.replays
        self.jobs[:] = state.jobs
        logger.info("studio_session_hydrated", replays=len(self.replays), jobs=len(self.jobs))

    async def reset(self) -> None:
        """Cancel scheduled work and return to the idle, empty state."""
        await self.scheduler.cancel_all()
        self.status.reset()
        self.replays.clear()
        self.jobs.clear()
        logger.info("studio_session_reset")

    async def close(self) -> None:
        """Cancel scheduled work, refuse new work and release the discovery source."""
        await self.scheduler.close()
        await self.discovery.source.close()
        logger.info("studio_session_closed")
