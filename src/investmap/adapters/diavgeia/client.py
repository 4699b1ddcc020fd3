"""Diavgeia search API client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from investmap.adapters.http_resilience import ResilientClient

from .schema import DecisionPayload, SearchResponse, VersionPayload

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

    from investmap.config.diavgeia import DiavgeiaConfig
    from investmap.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


class DiavgeiaAPIError(RuntimeError):
    """Raised when the Diavgeia API returns an unexpected response."""


class DiavgeiaClient:
    """Low-level HTTP client for the Diavgeia search API."""

    def __init__(
        self,
        *,
        config: DiavgeiaConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    async def search_decisions(
        self,
        *,
        from_date: date,
        to_date: date | None = None,
    ) -> list[DecisionPayload]:
        """Return the unit's decisions issued in the window, most recent first."""

        decisions: list[DecisionPayload] = []
        async with self._client_factory(self._resilience) as client:
            for page in range(self._config.max_pages):
                params = self._search_params(from_date=from_date, to_date=to_date, page=page)
                if page == 0:
                    log.info("Searching Diavgeia with %s", params)
                response = await self._get_json(client, "search", params=params)
                payload = SearchResponse.model_validate(response)
                if page == 0:
                    log.info("Total results found: %s", payload.info.total)
                decisions.extend(payload.decisions)
                fetched_all = (page + 1) * self._config.page_size >= payload.info.total
                if fetched_all or not payload.decisions:
                    break
            else:
                log.warning(
                    "Stopped after %s pages; narrow the date window to see older decisions",
                    self._config.max_pages,
                )
        return decisions

    async def fetch_version(self, version_id: str) -> VersionPayload:
        async with self._client_factory(self._resilience) as client:
            response = await self._get_json(client, f"decisions/version/{version_id}")
        return VersionPayload.model_validate(response)

    def _search_params(
        self,
        *,
        from_date: date,
        to_date: date | None,
        page: int,
    ) -> dict[str, str]:
        params = {
            "q": f"organizationUid:{self._config.organization_uid}",
            "fq": f"unitUid:{self._config.unit_uid}",
            "from_date": from_date.isoformat(),
        }
        if to_date is not None:
            params["to_date"] = to_date.isoformat()
        params.update(
            {
                "page": str(page),
                "sort": "recent",
                "size": str(self._config.page_size),
            }
        )
        return params

    async def _get_json(
        self,
        client: ResilientClient,
        path: str,
        *,
        params: dict[str, str] | None = None,
    ) -> dict[str, object]:
        if self._resilience.base_url is None:
            raise DiavgeiaAPIError("Missing Diavgeia base_url in resilience configuration")
        response = await client.get(path, params=params)
        response.raise_for_status()

        try:
            payload = response.json()
        except ValueError as exc:
            raise DiavgeiaAPIError("Diavgeia response is not JSON") from exc
        if not isinstance(payload, dict):
            raise DiavgeiaAPIError("Unexpected Diavgeia response payload")
        return payload
