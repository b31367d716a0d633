"""Discovery source backed by an HTTP function."""

from typing import Any

import httpx

from replay_studio.adapters.discovery.base import (
    DiscoveryError,
    DiscoveryResponse,
    DiscoverySource,
)
from replay_studio.domain.models import ReplayFilter
from replay_studio.logging import get_logger

logger = get_logger(__name__)


class EdgeFunctionDiscoverySource(DiscoverySource):
    """POSTs the filter to a discovery function and relays its records.

    The function answers ``{"replays": [...]}`` or, when it has no live
    credentials, ``{"error": "...", "replays": [...]}`` with fallback data.
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            url: Function endpoint
            api_key: Optional bearer key
            timeout: Request timeout in seconds
            client: Preconfigured HTTP client (tests pass one with a mock transport)
        """
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return "edge"

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def fetch(self, replay_filter: ReplayFilter) -> DiscoveryResponse:
        client = self._get_client()
        payload = replay_filter.to_payload()

        logger.info("edge_discovery_request", url=self.url, filters=payload["filters"])

        try:
            response = await client.post(self.url, json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error("edge_discovery_network_error", error=str(e))
            raise DiscoveryError(f"Unable to reach discovery function: {e}") from e

        if response.status_code >= 300:
            logger.error(
                "edge_discovery_api_error",
                status=response.status_code,
                body=response.text[:500],
            )
            raise DiscoveryError(f"Discovery function error: {response.status_code}")

        try:
            data: Any = response.json()
        except ValueError as e:
            raise DiscoveryError("Discovery function returned invalid JSON") from e

        replays = data.get("replays", []) if isinstance(data, dict) else None
        if not isinstance(replays, list):
            logger.error("edge_discovery_unexpected_body", body=response.text[:500])
            raise DiscoveryError("Discovery function returned an unexpected body")
        error = data.get("error")

        logger.info("edge_discovery_response", count=len(replays), fallback=error is not None)
        return DiscoveryResponse(replays=list(replays), error=error)

    async def health_check(self) -> bool:
        return bool(self.url)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
