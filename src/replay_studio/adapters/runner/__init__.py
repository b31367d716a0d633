"""Job runners that record and publish queued replays."""

from replay_studio.adapters.runner.base import JobRunner, ProgressReporter
from replay_studio.adapters.runner.simulated import SIMULATED_STEPS, SimulatedJobRunner
from replay_studio.config import Settings
from replay_studio.logging import get_logger

logger = get_logger(__name__)


def get_job_runner(settings: Settings) -> JobRunner:
    """Get the configured job runner."""
    provider_name = settings.job_runner_provider.lower()

    if provider_name == "simulated":
        return SimulatedJobRunner(step_delay=settings.job_step_delay_seconds)

    logger.warning("unknown_job_runner_provider", provider=provider_name, fallback="simulated")
    return SimulatedJobRunner(step_delay=settings.job_step_delay_seconds)


__all__ = [
    "JobRunner",
    "ProgressReporter",
    "SIMULATED_STEPS",
    "SimulatedJobRunner",
    "get_job_runner",
]
