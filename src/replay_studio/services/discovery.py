"""Replay discovery query engine."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from replay_studio.adapters.discovery.base import DiscoveryError, DiscoverySource
from replay_studio.adapters.discovery.stub import MockReplayGenerator
from replay_studio.domain.enums import DedupePolicy
from replay_studio.domain.models import DEFAULT_PATCH, Replay, ReplayFilter, SystemStatus
from replay_studio.logging import get_logger
from replay_studio.services.scheduler import SchedulerClosedError, TaskScheduler

logger = get_logger(__name__)

CONTINUOUS_SEARCH_KEY = "discovery:continuous"
DEFAULT_CONTINUOUS_INTERVAL = 10.0


@dataclass
class SearchOutcome:
    """Result of one discovery search."""

    success: bool
    description: str
    replays: list[Replay] = field(default_factory=list)
    error: str | None = None
    fallback: bool = False
    rejected: int = 0  # raw records dropped by normalization or the filter

    @property
    def count(self) -> int:
        return len(self.replays)

    @property
    def message(self) -> str:
        """User-visible summary of the search."""
        if not self.success:
            return self.error or "Search failed."
        return f"Found {self.count} replays using {self.description} configuration."


class DiscoveryEngine:
    """Turns a replay filter into normalized replays appended to the session.

    Failed searches leave the known replays and every counter untouched. When
    the source reports it has no live credentials, locally generated replays
    that satisfy the filter are used instead.
    """

    def __init__(
        self,
        source: DiscoverySource,
        status: SystemStatus,
        replays: list[Replay],
        scheduler: TaskScheduler,
        generator: MockReplayGenerator | None = None,
        dedupe_policy: DedupePolicy = DedupePolicy.ALLOW,
        continuous_interval: float = DEFAULT_CONTINUOUS_INTERVAL,
        default_patch: str = DEFAULT_PATCH,
    ) -> None:
        """Initialize the engine.

        Args:
            source: Where raw replay records come from
            status: Session status updated on successful searches
            replays: Session's known replays (appended to in place)
            scheduler: Session scheduler used for continuous searching
            generator: Fallback generator (defaults to an unseeded one)
            dedupe_policy: Whether already-known replay ids are appended again
            continuous_interval: Seconds between continuous searches
            default_patch: Patch for records that do not report one
        """
        self.source = source
        self.status = status
        self.replays = replays
        self.scheduler = scheduler
        self.generator = generator or MockReplayGenerator()
        self.dedupe_policy = dedupe_policy
        self.continuous_interval = continuous_interval
        self.default_patch = default_patch

    async def search(self, replay_filter: ReplayFilter) -> SearchOutcome:
        """Run one search and merge its replays into the session."""
        description = replay_filter.describe()
        logger.info(
            "discovery_search_started",
            source=self.source.name,
            server=replay_filter.server,
            mode=replay_filter.recording_mode,
            effective_mode=replay_filter.effective_mode,
        )

        try:
            response = await self.source.fetch(replay_filter)
        except DiscoveryError as e:
            logger.error("discovery_search_failed", source=self.source.name, error=str(e))
            return SearchOutcome(
                success=False,
                description=description,
                error=f"Unable to fetch replays: {e}",
            )

        raw_replays = response.replays
        if response.is_fallback:
            logger.warning("discovery_using_fallback", reason=response.error)
            if not raw_replays:
                raw_replays = self.generator.generate(replay_filter)

        replays, rejected = self._normalize(raw_replays, replay_filter)
        added = self._merge(replays)

        self.status.replays_discovered += len(added)
        self.status.searches_completed += 1
        self.status.touch()

        outcome = SearchOutcome(
            success=True,
            description=description,
            replays=added,
            error=response.error,
            fallback=response.is_fallback,
            rejected=rejected,
        )
        logger.info(
            "discovery_search_completed",
            count=outcome.count,
            rejected=rejected,
            fallback=outcome.fallback,
            description=description,
        )

        if replay_filter.is_continuous:
            self._schedule_next(replay_filter)

        return outcome

    def _normalize(
        self, raw_replays: list[dict[str, Any]], replay_filter: ReplayFilter
    ) -> tuple[list[Replay], int]:
        replays = []
        rejected = 0
        for raw in raw_replays:
            try:
                replay = Replay.from_raw(raw, default_patch=self.default_patch)
            except (TypeError, ValueError) as e:
                logger.warning(
                    "discovery_record_invalid",
                    record_id=raw.get("id") if isinstance(raw, dict) else None,
                    error=str(e),
                )
                rejected += 1
                continue
            if not replay_filter.accepts(replay):
                rejected += 1
                continue
            replays.append(replay)
        return replays, rejected

    def _merge(self, replays: list[Replay]) -> list[Replay]:
        if self.dedupe_policy == DedupePolicy.BY_ID:
            known = {r.id for r in self.replays}
            fresh = []
            for replay in replays:
                if replay.id not in known:
                    known.add(replay.id)
                    fresh.append(replay)
            replays = fresh
        self.replays.extend(replays)
        return replays

    def _schedule_next(self, replay_filter: ReplayFilter) -> None:
        try:
            self.scheduler.spawn(CONTINUOUS_SEARCH_KEY, self._search_later(replay_filter))
        except SchedulerClosedError:
            logger.info("continuous_search_not_scheduled", reason="session closed")
            return
        logger.debug("continuous_search_scheduled", delay=self.continuous_interval)

    async def _search_later(self, replay_filter: ReplayFilter) -> None:
        await asyncio.sleep(self.continuous_interval)
        outcome = await self.search(replay_filter)
        if not outcome.success:
            logger.warning("continuous_search_stopped", error=outcome.error)

    @property
    def continuous_active(self) -> bool:
        return self.scheduler.is_active(CONTINUOUS_SEARCH_KEY)

    def stop_continuous(self) -> bool:
        """Stop continuous searching.

        Returns:
            True if a scheduled search was cancelled
        """
        stopped = self.scheduler.cancel(CONTINUOUS_SEARCH_KEY)
        if stopped:
            logger.info("continuous_search_cancelled")
        return stopped
