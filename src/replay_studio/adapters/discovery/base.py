"""Base interface for replay discovery sources."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from replay_studio.domain.models import ReplayFilter


class DiscoveryError(Exception):
    """Raised when a discovery source cannot be reached or answers with an error status."""


@dataclass
class DiscoveryResponse:
    """Raw answer from a discovery source.

    ``error`` set together with ``replays`` means the source could not serve
    live data (e.g. no credentials) and the records are fallback data. An
    error with no records asks the caller to generate its own fallback.
    """

    replays: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.error is not None


class DiscoverySource(ABC):
    """Abstract base class for replay discovery sources.

    Implementations:
    - StubDiscoverySource: Reports missing credentials so callers use generated data
    - EdgeFunctionDiscoverySource: Delegates to an HTTP function
    - RiotDiscoverySource: Queries the Riot Games API directly
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name identifier."""
        ...

    @abstractmethod
    async def fetch(self, replay_filter: ReplayFilter) -> DiscoveryResponse:
        """Fetch raw replay records matching a filter.

        Args:
            replay_filter: Search criteria

        Returns:
            DiscoveryResponse with raw records and an optional fallback error

        Raises:
            DiscoveryError: On network failure or a non-2xx response
        """
        ...

    async def health_check(self) -> bool:
        """Check if the source is available.

        Returns:
            True if source is operational
        """
        return True

    async def close(self) -> None:
        """Release any network resources held by the source."""
        return None
