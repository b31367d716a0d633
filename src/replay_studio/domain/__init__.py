"""Domain models and business logic."""

from replay_studio.domain.enums import (
    DedupePolicy,
    JobStatus,
    RecordingMode,
    Server,
    Tier,
)
from replay_studio.domain.models import (
    InvalidFilterError,
    Job,
    Replay,
    ReplayFilter,
    SystemStatus,
)

__all__ = [
    "DedupePolicy",
    "InvalidFilterError",
    "Job",
    "JobStatus",
    "RecordingMode",
    "Replay",
    "ReplayFilter",
    "Server",
    "SystemStatus",
    "Tier",
]
