"""Replay discovery sources."""

from replay_studio.adapters.discovery.base import (
    DiscoveryError,
    DiscoveryResponse,
    DiscoverySource,
)
from replay_studio.adapters.discovery.edge_function import EdgeFunctionDiscoverySource
from replay_studio.adapters.discovery.riot import RiotDiscoverySource
from replay_studio.adapters.discovery.stub import MockReplayGenerator, StubDiscoverySource
from replay_studio.config import Settings
from replay_studio.logging import get_logger

logger = get_logger(__name__)


def get_discovery_source(settings: Settings) -> DiscoverySource:
    """Get the configured discovery source."""
    provider_name = settings.discovery_provider.lower()

    if provider_name == "stub":
        return StubDiscoverySource()
    elif provider_name == "edge":
        if not settings.discovery_function_url:
            logger.warning("discovery_function_url_missing", fallback="stub")
            return StubDiscoverySource()
        return EdgeFunctionDiscoverySource(
            url=settings.discovery_function_url,
            api_key=settings.discovery_function_key,
            timeout=settings.discovery_timeout_seconds,
        )
    elif provider_name == "riot":
        return RiotDiscoverySource(
            api_key=settings.riot_api_key,
            timeout=settings.discovery_timeout_seconds,
        )

    logger.warning("unknown_discovery_provider", provider=provider_name, fallback="stub")
    return StubDiscoverySource()


__all__ = [
    "DiscoveryError",
    "DiscoveryResponse",
    "DiscoverySource",
    "EdgeFunctionDiscoverySource",
    "MockReplayGenerator",
    "RiotDiscoverySource",
    "StubDiscoverySource",
    "get_discovery_source",
]
