"""Application services."""

from replay_studio.services.discovery import DiscoveryEngine, SearchOutcome
from replay_studio.services.queue import InvalidTransitionError, JobQueueManager, QueueStats
from replay_studio.services.scheduler import SchedulerClosedError, TaskScheduler
from replay_studio.services.session import StudioSession
from replay_studio.services.store import StoredState, load_snapshot

__all__ = [
    "DiscoveryEngine",
    "InvalidTransitionError",
    "JobQueueManager",
    "QueueStats",
    "SchedulerClosedError",
    "SearchOutcome",
    "StoredState",
    "StudioSession",
    "TaskScheduler",
    "load_snapshot",
]
