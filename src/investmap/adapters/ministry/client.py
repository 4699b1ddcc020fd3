"""HTTP access to the ministry website."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from investmap.adapters.http_resilience import ResilientClient

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from investmap.config.http_resilience import ResilienceConfig
    from investmap.config.ministry import MinistryConfig

log = getLogger(__name__)


class MinistryClient:
    """Fetches HTML pages; one pooled, rate-limited connection per scrape."""

    def __init__(
        self,
        *,
        config: MinistryConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._client: ResilientClient | None = None

    async def __aenter__(self) -> MinistryClient:
        self._client = self._client_factory(self._resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_page(self, url: str) -> str | None:
        """Return the page body, or ``None`` when the page cannot be fetched."""

        if self._client is None:
            raise RuntimeError("MinistryClient must be used as an async context manager")
        log.debug("Fetching %s", url)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            log.error("Error fetching %s: %s", url, exc)
            return None
        return response.text
