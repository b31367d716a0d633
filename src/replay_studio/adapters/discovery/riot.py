"""Discovery source that queries the Riot Games API directly.

The lookup is a sequential chain: ranked league -> summoner -> recent match
ids -> match details. Individual player and match failures are skipped; only
a failed league lookup fails the whole search.
"""

import asyncio
from datetime import UTC, datetime
from typing import Any

import httpx

from replay_studio.adapters.discovery.base import (
    DiscoveryError,
    DiscoveryResponse,
    DiscoverySource,
)
from replay_studio.domain.enums import RecordingMode, Tier
from replay_studio.domain.models import ReplayFilter, kda_ratio
from replay_studio.logging import get_logger

logger = get_logger(__name__)

NO_API_KEY_ERROR = "Riot API key not configured. Set RIOT_API_KEY to fetch live replays."

LEAGUE_PATHS = {
    Tier.CHALLENGER: "challengerleagues",
    Tier.GRANDMASTER: "grandmasterleagues",
    Tier.MASTER: "masterleagues",
}
RANKED_QUEUE = "RANKED_SOLO_5x5"

TOP_PLAYERS = 10
MATCH_IDS_PER_PLAYER = 5
MATCHES_PER_PLAYER = 2
PLAYER_PAUSE_SECONDS = 0.1
REPLAY_BASE_URL = "https://replay.leagueoflegends.com"


class RiotDiscoverySource(DiscoverySource):
    """Fetches recent high-elo matches for the top players of a ranked league."""

    def __init__(
        self,
        api_key: str | None,
        timeout: float = 30.0,
        player_pause: float = PLAYER_PAUSE_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.player_pause = player_pause
        self._client = client

    @property
    def name(self) -> str:
        return "riot"

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any | None:
        """GET a Riot endpoint; None on a non-200 or non-JSON answer."""
        response = await self._get_client().get(
            url,
            params=params,
            headers={"X-Riot-Token": self.api_key or ""},
        )
        if response.status_code != 200:
            logger.debug("riot_api_non_200", url=url, status=response.status_code)
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.warning("riot_api_invalid_json", url=url, error=str(e))
            return None

    def _league_tier(self, replay_filter: ReplayFilter) -> Tier:
        if replay_filter.effective_mode in (RecordingMode.SINGLE_TIER, RecordingMode.CHAMPION_TIER):
            return replay_filter.target_tier
        return Tier.CHALLENGER

    async def fetch(self, replay_filter: ReplayFilter) -> DiscoveryResponse:
        if not self.api_key:
            logger.info("riot_api_key_missing")
            return DiscoveryResponse(replays=[], error=NO_API_KEY_ERROR)

        server = replay_filter.server
        tier = self._league_tier(replay_filter)
        league_url = (
            f"https://{server.platform_host}.api.riotgames.com"
            f"/lol/league/v4/{LEAGUE_PATHS[tier]}/by-queue/{RANKED_QUEUE}"
        )

        try:
            league = await self._get_json(league_url)
        except httpx.HTTPError as e:
            logger.error("riot_league_network_error", error=str(e))
            raise DiscoveryError(f"Unable to reach Riot API: {e}") from e

        if not isinstance(league, dict):
            raise DiscoveryError(f"Failed to fetch {tier.label} league data")

        entries = league.get("entries", [])
        logger.info("riot_league_fetched", tier=tier, players=len(entries))

        replays: list[dict[str, Any]] = []
        for entry in entries[:TOP_PLAYERS]:
            try:
                replays.extend(await self._player_replays(entry, tier, replay_filter))
            except httpx.HTTPError as e:
                logger.warning("riot_player_fetch_failed", error=str(e))

            await asyncio.sleep(self.player_pause)

        logger.info("riot_discovery_completed", count=len(replays))
        return DiscoveryResponse(replays=replays)

    async def _player_replays(
        self, entry: dict[str, Any], tier: Tier, replay_filter: ReplayFilter
    ) -> list[dict[str, Any]]:
        server = replay_filter.server
        platform = f"https://{server.platform_host}.api.riotgames.com"
        regional = f"https://{server.regional_host}.api.riotgames.com"

        puuid = entry.get("puuid")
        name = entry.get("summonerName")
        if not puuid:
            summoner = await self._get_json(
                f"{platform}/lol/summoner/v4/summoners/{entry.get('summonerId')}"
            )
            if not isinstance(summoner, dict):
                return []
            puuid = summoner.get("puuid")
            name = summoner.get("name") or name
        name = name or str(puuid)[:12]

        mode = replay_filter.effective_mode
        if mode == RecordingMode.SPECIFIC_PRO and replay_filter.specific_player:
            if name.lower() != replay_filter.specific_player.lower():
                return []

        match_ids = await self._get_json(
            f"{regional}/lol/match/v5/matches/by-puuid/{puuid}/ids",
            params={"start": 0, "count": MATCH_IDS_PER_PLAYER},
        )
        if not isinstance(match_ids, list) or not match_ids:
            return []

        replays = []
        for match_id in match_ids[:MATCHES_PER_PLAYER]:
            try:
                match = await self._get_json(f"{regional}/lol/match/v5/matches/{match_id}")
            except httpx.HTTPError as e:
                logger.warning("riot_match_fetch_failed", match_id=match_id, error=str(e))
                continue
            if not isinstance(match, dict):
                continue

            record = self._build_record(match_id, match, puuid, name, tier, replay_filter)
            if record is not None:
                replays.append(record)
        return replays

    def _build_record(
        self,
        match_id: str,
        match: dict[str, Any],
        puuid: str,
        name: str,
        tier: Tier,
        replay_filter: ReplayFilter,
    ) -> dict[str, Any] | None:
        """Turn a match into a raw replay record, or None if the filter rejects it."""
        info = match.get("info", {})
        participant = next(
            (p for p in info.get("participants", []) if p.get("puuid") == puuid),
            None,
        )
        if participant is None:
            return None

        if not tier.at_least(replay_filter.tier):
            return None

        duration = int(info.get("gameDuration", 0))
        if duration < replay_filter.min_duration_seconds:
            return None

        kills = int(participant.get("kills", 0))
        deaths = int(participant.get("deaths", 0))
        assists = int(participant.get("assists", 0))
        ratio = kda_ratio(kills, deaths, assists)
        if ratio < replay_filter.kda_threshold:
            return None

        if replay_filter.only_winners and not participant.get("win"):
            return None

        champion = participant.get("championName", "Unknown")
        if (
            replay_filter.effective_mode == RecordingMode.CHAMPION_TIER
            and replay_filter.specific_champion
            and champion.lower() != replay_filter.specific_champion.lower()
        ):
            return None

        created = info.get("gameCreation")
        return {
            "id": match_id,
            "player": name,
            "champion": champion,
            "rank": tier.label,
            "tier": tier.label,
            "kda": f"{kills}/{deaths}/{assists}",
            "kdaRatio": ratio,
            "duration": duration,
            "patch": info.get("gameVersion"),
            "gameMode": info.get("gameMode"),
            "win": bool(participant.get("win")),
            "downloadUrl": f"{REPLAY_BASE_URL}/{replay_filter.server.value}/{match_id}",
            "teamId": participant.get("teamId"),
            "createdAt": (
                datetime.fromtimestamp(created / 1000, UTC).isoformat() if created else None
            ),
        }

    async def health_check(self) -> bool:
        return bool(self.api_key)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
