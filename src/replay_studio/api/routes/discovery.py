"""Replay discovery endpoints."""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from replay_studio.api.deps import StudioDep
from replay_studio.domain.enums import RecordingMode, Server
from replay_studio.domain.models import InvalidFilterError, Replay, ReplayFilter
from replay_studio.logging import get_logger

router = APIRouter(prefix="/discovery", tags=["Discovery"])
logger = get_logger(__name__)


class SearchRequest(BaseModel):
    """Replay search filters."""

    server: Server = Server.KR
    tier: str = Field(
        default="challenger",
        pattern="(?i)^(master|grandmaster|challenger)$",
        description="Minimum tier",
    )
    min_duration: int = Field(default=25, ge=15, le=60, description="Minimum game length (minutes)")
    kda_threshold: float = Field(default=2.0, ge=1.0, le=10.0, description="Minimum KDA ratio")
    only_winners: bool = True
    recording_mode: RecordingMode = RecordingMode.RANDOM_PRO
    specific_player: str | None = Field(None, max_length=100)
    selected_tier: str | None = Field(None, max_length=50)
    specific_champion: str | None = Field(None, max_length=100)
    continuous_recording: bool = False

    def to_filter(self) -> ReplayFilter:
        return ReplayFilter(**self.model_dump())


class ReplayResponse(BaseModel):
    """A discovered replay."""

    id: str
    player: str
    champion: str
    rank: str
    kda: str
    kda_display: str
    kda_ratio: float
    duration: str
    duration_seconds: int
    game_mode: str
    patch: str
    download_url: str
    team_id: int | None = None
    win: bool | None = None
    fog_of_war: str

    @classmethod
    def from_domain(cls, replay: Replay) -> "ReplayResponse":
        return cls(
            id=replay.id,
            player=replay.player,
            champion=replay.champion,
            rank=replay.rank,
            kda=replay.kda,
            kda_display=replay.kda_display,
            kda_ratio=round(replay.kda_ratio, 2),
            duration=replay.duration,
            duration_seconds=replay.duration_seconds,
            game_mode=replay.game_mode,
            patch=replay.patch,
            download_url=replay.download_url,
            team_id=replay.team_id,
            win=replay.win,
            fog_of_war=replay.fog_of_war,
        )


class SearchResponse(BaseModel):
    """Result of a discovery search."""

    success: bool
    count: int
    description: str
    message: str
    error: str | None = None
    fallback: bool = False
    rejected: int = 0
    continuous: bool = False
    replays: list[ReplayResponse]


class ContinuousResponse(BaseModel):
    """Continuous search state."""

    active: bool
    stopped: bool | None = None


@router.post(
    "/search",
    response_model=SearchResponse,
    summary="Search replays",
    description="Run one discovery search and append its replays to the session.",
)
async def search_replays(request: SearchRequest, studio: StudioDep) -> SearchResponse:
    """Search for replays matching the filters."""
    try:
        replay_filter = request.to_filter()
    except InvalidFilterError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    outcome = await studio.discovery.search(replay_filter)
    if not outcome.success:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=outcome.message)

    return SearchResponse(
        success=True,
        count=outcome.count,
        description=outcome.description,
        message=outcome.message,
        error=outcome.error,
        fallback=outcome.fallback,
        rejected=outcome.rejected,
        continuous=studio.discovery.continuous_active,
        replays=[ReplayResponse.from_domain(r) for r in outcome.replays],
    )


@router.get(
    "/replays",
    response_model=list[ReplayResponse],
    summary="List replays",
    description="All replays discovered in this session, in discovery order.",
)
async def list_replays(studio: StudioDep) -> list[ReplayResponse]:
    return [ReplayResponse.from_domain(r) for r in studio.replays]


@router.get(
    "/continuous",
    response_model=ContinuousResponse,
    summary="Continuous search state",
)
async def continuous_state(studio: StudioDep) -> ContinuousResponse:
    return ContinuousResponse(active=studio.discovery.continuous_active)


@router.post(
    "/continuous/stop",
    response_model=ContinuousResponse,
    summary="Stop continuous search",
    description="Cancel the scheduled follow-up search of continuous automation mode.",
)
async def stop_continuous(studio: StudioDep) -> ContinuousResponse:
    stopped = studio.discovery.stop_continuous()
    logger.info("continuous_search_stop_requested", stopped=stopped)
    return ContinuousResponse(active=studio.discovery.continuous_active, stopped=stopped)
