"""Domain enumerations."""

from enum import StrEnum


class Server(StrEnum):
    """Supported game server regions."""

    KR = "kr"
    NA = "na"
    EUW = "euw"
    EUNE = "eune"

    @property
    def platform_host(self) -> str:
        """Riot platform routing value (league and summoner endpoints)."""
        return _PLATFORM_HOSTS[self]

    @property
    def regional_host(self) -> str:
        """Riot regional routing value (match endpoints)."""
        return _REGIONAL_HOSTS[self]


_PLATFORM_HOSTS = {
    Server.KR: "kr",
    Server.NA: "na1",
    Server.EUW: "euw1",
    Server.EUNE: "eun1",
}

_REGIONAL_HOSTS = {
    Server.KR: "asia",
    Server.NA: "americas",
    Server.EUW: "europe",
    Server.EUNE: "europe",
}


class Tier(StrEnum):
    """High-elo ranked tiers, lowest first."""

    MASTER = "master"
    GRANDMASTER = "grandmaster"
    CHALLENGER = "challenger"

    @classmethod
    def parse(cls, value: "str | Tier") -> "Tier":
        """Parse a tier name case-insensitively ("Challenger" == "challenger")."""
        return cls(str(value).strip().lower())

    @property
    def rank(self) -> int:
        return list(Tier).index(self)

    @property
    def label(self) -> str:
        """Display name, e.g. "Grandmaster"."""
        return self.value.capitalize()

    def at_least(self, minimum: "Tier") -> bool:
        return self.rank >= minimum.rank


class RecordingMode(StrEnum):
    """Strategy a search uses to pick replays."""

    RANDOM_PRO = "random-pro"
    SPECIFIC_PRO = "specific-pro"
    SINGLE_TIER = "single-tier"
    ALL_TIERS = "all-tiers"
    CHAMPION_TIER = "champion-tier"
    CONTINUOUS_AUTO = "continuous-auto"


class JobStatus(StrEnum):
    """Status of an upload job."""

    PENDING = "pending"
    PROCESSING = "processing"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class DedupePolicy(StrEnum):
    """How discovery results are merged into the known replays."""

    ALLOW = "allow"  # Append everything, duplicates included
    BY_ID = "by_id"  # Skip replays whose id is already known
