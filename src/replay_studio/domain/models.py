"""Domain models - pure Python classes independent of the store and the API."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from replay_studio.domain.enums import JobStatus, RecordingMode, Server, Tier

DEFAULT_GAME_MODE = "Ranked Solo"
DEFAULT_PATCH = "14.1"
DEFAULT_DOWNLOAD_URL = "#"
DEFAULT_FILE_SIZE = "2.0 GB"
DEFAULT_THUMBNAIL = "/api/placeholder/120/68"

IDLE_TASK = "Idle"
SEARCHING_TASK = "Searching for replays..."

MIN_DURATION_RANGE = (15, 60)  # minutes
KDA_THRESHOLD_RANGE = (1.0, 10.0)

TITLE_SUFFIX = "CHALLENGER GAMEPLAY"


class InvalidFilterError(ValueError):
    """Raised when a replay filter carries an out-of-range value."""


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_duration(seconds: int) -> str:
    """Format seconds as m:ss."""
    seconds = max(int(seconds), 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


def parse_duration(value: int | float | str) -> int:
    """Parse a duration given as raw seconds or as an "mm:ss" / "h:mm:ss" string.

    Raises:
        ValueError: If the value is neither.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, int | float):
        return int(value)

    text = str(value).strip()
    if ":" in text:
        seconds = 0
        for part in text.split(":"):
            if not part.isdigit():
                raise ValueError(f"Invalid duration: {value!r}")
            seconds = seconds * 60 + int(part)
        return seconds
    if text.isdigit():
        return int(text)
    raise ValueError(f"Invalid duration: {value!r}")


def format_file_size(size_bytes: int) -> str:
    """Format a byte count with a base-1024 unit, e.g. 1536 -> "1.5 KB"."""
    if size_bytes <= 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            break
        size /= 1024
    else:
        unit = "GB"
    value = f"{size:.1f}".removesuffix(".0")
    return f"{value} {unit}"


def parse_kda(kda: str) -> tuple[int, int, int]:
    """Split a "kills/deaths/assists" string."""
    parts = kda.strip().split("/")
    if len(parts) != 3:
        raise ValueError(f"Invalid KDA: {kda!r}")
    kills, deaths, assists = (int(p) for p in parts)
    return kills, deaths, assists


def kda_ratio(kills: int, deaths: int, assists: int) -> float:
    """(kills + assists) / deaths, with zero deaths counted as one."""
    return (kills + assists) / max(deaths, 1)


def build_job_title(player: str, champion: str, kda: str) -> str:
    """Upload title for a replay, e.g. "FAKER AZIR 12/2/8 CHALLENGER GAMEPLAY"."""
    return f"{player.upper()} {champion.upper()} {kda} {TITLE_SUFFIX}"


@dataclass(frozen=True)
class ReplayFilter:
    """Search criteria for one discovery request.

    Mode-specific fields are free-form; when the field a mode needs is
    missing, the search falls back to a broader mode instead of failing
    (see ``effective_mode``).
    """

    server: Server = Server.KR
    tier: Tier = Tier.CHALLENGER
    min_duration: int = 25
    kda_threshold: float = 2.0
    only_winners: bool = True
    recording_mode: RecordingMode = RecordingMode.RANDOM_PRO
    specific_player: str | None = None
    selected_tier: str | None = None
    specific_champion: str | None = None
    continuous_recording: bool = False

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "server", Server(str(self.server).lower()))
        except ValueError:
            raise InvalidFilterError(f"Unsupported server: {self.server!r}") from None
        try:
            object.__setattr__(self, "tier", Tier.parse(self.tier))
        except ValueError:
            raise InvalidFilterError(f"Unsupported tier: {self.tier!r}") from None
        try:
            object.__setattr__(self, "recording_mode", RecordingMode(self.recording_mode))
        except ValueError:
            raise InvalidFilterError(
                f"Unsupported recording mode: {self.recording_mode!r}"
            ) from None

        low, high = MIN_DURATION_RANGE
        if not low <= self.min_duration <= high:
            raise InvalidFilterError(
                f"min_duration must be between {low} and {high} minutes, got {self.min_duration}"
            )
        low_kda, high_kda = KDA_THRESHOLD_RANGE
        if not low_kda <= self.kda_threshold <= high_kda:
            raise InvalidFilterError(
                f"kda_threshold must be between {low_kda} and {high_kda}, got {self.kda_threshold}"
            )

    @property
    def min_duration_seconds(self) -> int:
        return self.min_duration * 60

    @property
    def is_continuous(self) -> bool:
        """Whether a successful search should schedule the next one."""
        return self.continuous_recording and self.recording_mode == RecordingMode.CONTINUOUS_AUTO

    @property
    def target_tier(self) -> Tier:
        """Tier a tier-scoped mode searches in: the selected tier, else the minimum tier."""
        if self.selected_tier:
            try:
                return Tier.parse(self.selected_tier)
            except ValueError:
                pass
        return self.tier

    @property
    def effective_mode(self) -> RecordingMode:
        """Recording mode after degrading for missing mode-specific fields."""
        if self.recording_mode == RecordingMode.SPECIFIC_PRO and not self.specific_player:
            return RecordingMode.RANDOM_PRO
        if self.recording_mode == RecordingMode.CHAMPION_TIER and not self.specific_champion:
            return RecordingMode.SINGLE_TIER
        return self.recording_mode

    def describe(self) -> str:
        """Human-readable description of the mode that produced a batch."""
        tier = self.selected_tier or self.tier.label
        descriptions = {
            RecordingMode.RANDOM_PRO: "random pro players",
            RecordingMode.SPECIFIC_PRO: f"{self.specific_player or 'specific'} player",
            RecordingMode.SINGLE_TIER: f"{tier} tier",
            RecordingMode.ALL_TIERS: "all high-elo tiers",
            RecordingMode.CHAMPION_TIER: f"{self.specific_champion or 'champion'} in {tier}",
            RecordingMode.CONTINUOUS_AUTO: "continuous automation mode",
        }
        return descriptions[self.recording_mode]

    def accepts(self, replay: "Replay") -> bool:
        """Whether a normalized replay satisfies the numeric and outcome constraints."""
        if replay.duration_seconds < self.min_duration_seconds:
            return False
        if replay.kda_ratio < self.kda_threshold:
            return False
        if self.only_winners and replay.win is False:
            return False
        if replay.tier is not None:
            try:
                if not Tier.parse(replay.tier).at_least(self.tier):
                    return False
            except ValueError:
                pass
        return True

    def to_payload(self) -> dict[str, Any]:
        """Request body sent to an external discovery source."""
        filters: dict[str, Any] = {
            "tier": self.tier.value,
            "duration": self.min_duration,
            "kda": self.kda_threshold,
            "server": self.server.value,
            "recordingMode": self.recording_mode.value,
            "onlyWinners": self.only_winners,
        }
        if self.specific_player:
            filters["specificPlayer"] = self.specific_player
        if self.selected_tier:
            filters["selectedTier"] = self.selected_tier
        if self.specific_champion:
            filters["specificChampion"] = self.specific_champion
        return {"filters": filters}


@dataclass(frozen=True)
class Replay:
    """A normalized record describing one captured match."""

    id: str
    player: str
    champion: str
    rank: str
    kda: str
    kda_ratio: float
    duration_seconds: int
    game_mode: str = DEFAULT_GAME_MODE
    patch: str = DEFAULT_PATCH
    download_url: str = DEFAULT_DOWNLOAD_URL
    team_id: int | None = None
    win: bool | None = None
    tier: str | None = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any], default_patch: str = DEFAULT_PATCH) -> "Replay":
        """Normalize a raw discovery record.

        Duration may be raw seconds or a pre-formatted "mm:ss" string. The KDA
        ratio is derived from the "k/d/a" string when the record omits it.

        Raises:
            ValueError: If the record is not a mapping, or a required field is
                missing or malformed.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"Replay record must be an object, got {type(raw).__name__}")

        try:
            replay_id = str(raw["id"])
            player = str(raw["player"])
            champion = str(raw["champion"])
        except KeyError as e:
            raise ValueError(f"Replay record is missing {e.args[0]!r}") from None

        kda = str(raw.get("kda") or "0/0/0")
        ratio = raw.get("kdaRatio")
        if ratio is None or ratio == "":
            ratio = kda_ratio(*parse_kda(kda))

        tier = raw.get("tier")
        division = raw.get("rank")
        rank_parts = [str(tier)] if tier else []
        if division and division != tier:
            rank_parts.append(str(division))

        team_id = raw.get("teamId")
        win = raw.get("win")

        return cls(
            id=replay_id,
            player=player,
            champion=champion,
            rank=" ".join(rank_parts) or "Unranked",
            kda=kda,
            kda_ratio=float(ratio),
            duration_seconds=parse_duration(raw.get("duration", 0)),
            game_mode=raw.get("gameMode") or DEFAULT_GAME_MODE,
            patch=raw.get("patch") or default_patch,
            download_url=raw.get("downloadUrl") or DEFAULT_DOWNLOAD_URL,
            team_id=int(team_id) if team_id is not None else None,
            win=bool(win) if win is not None else None,
            tier=str(tier) if tier else None,
        )

    @property
    def duration(self) -> str:
        return format_duration(self.duration_seconds)

    @property
    def kda_display(self) -> str:
        return f"{self.kda} ({self.kda_ratio:.2f} KDA)"

    @property
    def fog_of_war(self) -> str:
        """Side whose vision the recording uses."""
        if self.team_id == 100:
            return "Blue"
        if self.team_id == 200:
            return "Red"
        return "Auto"

    def recording_settings(self) -> dict[str, Any]:
        return {
            "fog_of_war": self.fog_of_war,
            "team_color": "blue" if self.team_id == 100 else "red",
            "auto_record": True,
        }


@dataclass
class Job:
    """One queued unit of work tracking a replay from acceptance to publication."""

    id: str
    title: str
    player: str
    champion: str
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    duration: str = "0:00"
    file_size: str = DEFAULT_FILE_SIZE
    thumbnail: str = DEFAULT_THUMBNAIL
    estimated_time: str = "Queued"
    video_url: str | None = None
    current_step: str | None = None
    replay: Replay | None = None
    recording_settings: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_replay(cls, replay: Replay, file_size: str = DEFAULT_FILE_SIZE) -> "Job":
        """Create a pending job for a replay."""
        return cls(
            id=uuid4().hex,
            title=build_job_title(replay.player, replay.champion, replay.kda),
            player=replay.player,
            champion=replay.champion,
            duration=replay.duration,
            file_size=file_size,
            replay=replay,
            recording_settings=replay.recording_settings(),
        )


@dataclass
class SystemStatus:
    """Process-wide status owned by a single studio session."""

    is_running: bool = False
    current_task: str = IDLE_TASK
    replays_found: int = 0
    videos_uploaded: int = 0
    replays_discovered: int = 0
    searches_completed: int = 0
    last_activity: datetime | None = None
    uptime_seconds: float = 0.0
    running_since: datetime | None = None

    def touch(self) -> None:
        self.last_activity = utc_now()

    def start(self) -> None:
        self.is_running = True
        self.current_task = SEARCHING_TASK
        self.running_since = utc_now()
        self.touch()

    def stop(self) -> None:
        if self.running_since is not None:
            self.uptime_seconds += (utc_now() - self.running_since).total_seconds()
        self.is_running = False
        self.current_task = IDLE_TASK
        self.running_since = None
        self.touch()

    def total_uptime_seconds(self) -> float:
        total = self.uptime_seconds
        if self.running_since is not None:
            total += (utc_now() - self.running_since).total_seconds()
        return total

    @property
    def uptime(self) -> str:
        minutes = int(self.total_uptime_seconds() // 60)
        return f"{minutes // 60}h {minutes % 60}m"

    def reset(self) -> None:
        """Return to the idle, zeroed state of a fresh session."""
        self.is_running = False
        self.current_task = IDLE_TASK
        self.replays_found = 0
        self.videos_uploaded = 0
        self.replays_discovered = 0
        self.searches_completed = 0
        self.last_activity = None
        self.uptime_seconds = 0.0
        self.running_since = None
