"""Ministry website entry point: project discovery and page capture."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import urljoin

from investmap.config.ministry import get_ministry_config
from investmap.domain.batching import process_in_batches
from investmap.domain.model import Candidate, SourceKind

from .client import MinistryClient
from .parsing import extract_basic_data, extract_gazette_links, extract_investment_links

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from investmap.config.ministry import MinistryConfig

log = getLogger(__name__)


class MinistrySource:
    """Implements ``SecondarySourceFetcher`` by scraping the project listing."""

    def __init__(
        self,
        *,
        config: MinistryConfig,
        client: MinistryClient | None = None,
        batch_size: int = 3,
        pause_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._client = client or MinistryClient(config=config)
        self._batch_size = batch_size
        self._pause_seconds = pause_seconds
        self._sleep = sleep

    @property
    def base_url(self) -> str:
        return self._config.resilience.base_url or ""

    async def __call__(self) -> list[Candidate]:
        async with self._client as client:
            links = await self._discover_links(client)
            log.info("Found %s investment links", len(links))
            if not links:
                return []

            async def capture(url: str) -> Candidate | None:
                return await self._capture(client, url)

            captured = await process_in_batches(
                links,
                capture,
                batch_size=self._batch_size,
                pause_seconds=self._pause_seconds,
                sleep=self._sleep,
            )
        candidates = [candidate for candidate in captured if candidate is not None]
        log.info("Captured %s of %s ministry project pages", len(candidates), len(links))
        return candidates

    async def _discover_links(self, client: MinistryClient) -> list[str]:
        listing = await client.fetch_page(self._absolute(self._config.project_list_path))
        links = extract_investment_links(listing or "", base_url=self.base_url)
        if len(links) >= self._config.min_links_before_fallback:
            return links

        log.info("Few project links on the listing page, trying region pages")
        for path in self._config.region_paths:
            page = await client.fetch_page(self._absolute(path))
            if page is None:
                continue
            for link in extract_investment_links(page, base_url=self.base_url):
                if link not in links:
                    links.append(link)
        return links

    async def _capture(self, client: MinistryClient, url: str) -> Candidate | None:
        html = await client.fetch_page(url)
        if not html:
            return None
        hint = extract_basic_data(html, url=url)
        gazettes = extract_gazette_links(html, base_url=self.base_url)
        if gazettes:
            hint = replace(hint, reference=replace(hint.reference, gazette=gazettes[0]))
        return Candidate(
            source=SourceKind.SECONDARY,
            subject=hint.name,
            document_url=url,
            page_content=html,
            hint=hint,
        )

    def _absolute(self, path: str) -> str:
        return urljoin(self.base_url, path)


def build_ministry_source(
    *,
    config: MinistryConfig | None = None,
    client: MinistryClient | None = None,
) -> MinistrySource:
    return MinistrySource(config=config or get_ministry_config(), client=client)
