"""Stub discovery source and the local fallback replay generator."""

import random
import time
from typing import Any

from replay_studio.adapters.discovery.base import DiscoveryResponse, DiscoverySource
from replay_studio.domain.enums import RecordingMode, Tier
from replay_studio.domain.models import Replay, ReplayFilter, kda_ratio
from replay_studio.logging import get_logger

logger = get_logger(__name__)

NOT_CONFIGURED_ERROR = "Discovery credentials not configured; using generated replays."

PRO_PLAYERS = [
    "Hide on bush",
    "Doran",
    "Canyon",
    "ShowMaker",
    "Keria",
    "Zeus",
    "Oner",
    "Faker",
    "Gumayusi",
    "BeryL",
]

CHAMPIONS = [
    "Azir",
    "LeBlanc",
    "Orianna",
    "Syndra",
    "Yasuo",
    "Graves",
    "Nidalee",
    "Lee Sin",
    "Elise",
    "Kindred",
    "Jinx",
    "Kai'Sa",
    "Ezreal",
    "Aphelios",
    "Jhin",
]

CANDIDATES_PER_BATCH = 15
MAX_BATCH_SIZE = 10


class MockReplayGenerator:
    """Generates plausible high-elo replay records for a filter.

    Candidates that violate the filter (tier, duration, KDA, winners only)
    are discarded, so every record returned already satisfies it.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def generate(self, replay_filter: ReplayFilter) -> list[dict[str, Any]]:
        """Generate raw replay records (the same shape a discovery source returns)."""
        batch_stamp = int(time.time() * 1000)
        prefix = replay_filter.server.value.upper()
        replays: list[dict[str, Any]] = []

        for i in range(CANDIDATES_PER_BATCH):
            raw = self._candidate(replay_filter, f"{prefix}_{batch_stamp}_{i}", i)
            if replay_filter.accepts(Replay.from_raw(raw)):
                replays.append(raw)

        logger.debug(
            "mock_replays_generated",
            mode=replay_filter.effective_mode,
            kept=len(replays),
            candidates=CANDIDATES_PER_BATCH,
        )
        return replays[:MAX_BATCH_SIZE]

    def _candidate(self, replay_filter: ReplayFilter, replay_id: str, index: int) -> dict[str, Any]:
        rng = self._rng
        mode = replay_filter.effective_mode

        player = rng.choice(PRO_PLAYERS)
        if mode == RecordingMode.SPECIFIC_PRO and replay_filter.specific_player:
            player = replay_filter.specific_player

        champion = rng.choice(CHAMPIONS)
        if mode == RecordingMode.CHAMPION_TIER and replay_filter.specific_champion:
            champion = replay_filter.specific_champion

        tier = self._tier_for(replay_filter, mode)

        kills = rng.randint(1, 15)
        deaths = rng.randint(0, 7)
        assists = rng.randint(2, 21)
        duration_seconds = rng.randint(25, 44) * 60 + rng.randint(0, 59)

        return {
            "id": replay_id,
            "player": player,
            "champion": champion,
            "rank": tier.label,
            "tier": tier.label,
            "kda": f"{kills}/{deaths}/{assists}",
            "kdaRatio": kda_ratio(kills, deaths, assists),
            "duration": duration_seconds,
            "patch": "14.1.1",
            "gameMode": "CLASSIC",
            "win": rng.random() > 0.5,
            "downloadUrl": (
                f"https://replay.leagueoflegends.com/{replay_filter.server.value}/mock_{index}"
            ),
            "teamId": rng.choice([100, 200]),
        }

    def _tier_for(self, replay_filter: ReplayFilter, mode: RecordingMode) -> Tier:
        if mode in (RecordingMode.SINGLE_TIER, RecordingMode.CHAMPION_TIER):
            return replay_filter.target_tier
        if mode == RecordingMode.ALL_TIERS:
            eligible = [t for t in Tier if t.at_least(replay_filter.tier)]
            return self._rng.choice(eligible)
        return Tier.CHALLENGER


class StubDiscoverySource(DiscoverySource):
    """Source used when no live data source is configured.

    Always answers with the not-configured sentinel and no records, which
    makes the discovery engine fall back to generated replays.
    """

    @property
    def name(self) -> str:
        return "stub"

    async def fetch(self, replay_filter: ReplayFilter) -> DiscoveryResponse:
        logger.info("stub_discovery_fetch", server=replay_filter.server)
        return DiscoveryResponse(replays=[], error=NOT_CONFIGURED_ERROR)
