"""Diavgeia entry points: registry search and corrected-version lookup."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from investmap.config.diavgeia import get_diavgeia_config
from investmap.domain.ports import RevisionLookupError

from .client import DiavgeiaAPIError, DiavgeiaClient
from .translator import translate_decision

if TYPE_CHECKING:
    from datetime import date

    from investmap.config.diavgeia import DiavgeiaConfig
    from investmap.domain.model import Candidate

log = getLogger(__name__)


def _default_start(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:  # 29 February
        return today.replace(year=today.year - years, day=28)


class DiavgeiaSource:
    """Implements ``PrimarySourceQuery`` and ``RevisionTargetLookup`` over Diavgeia."""

    def __init__(self, *, config: DiavgeiaConfig, client: DiavgeiaClient | None = None) -> None:
        self._config = config
        self._client = client or DiavgeiaClient(config=config)

    async def __call__(
        self,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Candidate]:
        from_date = start or _default_start(
            datetime.now(UTC).date(), self._config.default_lookback_years
        )
        try:
            decisions = await self._client.search_decisions(from_date=from_date, to_date=end)
        except (httpx.HTTPError, DiavgeiaAPIError, ValidationError) as exc:
            log.error("Error querying Diavgeia API: %s", exc)
            return []

        candidates: list[Candidate] = []
        seen: set[str] = set()
        for decision in decisions:
            if decision.ada in seen:
                continue
            seen.add(decision.ada)
            candidates.append(translate_decision(decision))
        return candidates

    async def lookup_revision_target(self, version_id: str) -> str | None:
        try:
            payload = await self._client.fetch_version(version_id)
        except (httpx.HTTPError, DiavgeiaAPIError, ValidationError) as exc:
            raise RevisionLookupError(f"version {version_id}: {exc}") from exc
        return payload.ada


def build_diavgeia_source(
    *,
    config: DiavgeiaConfig | None = None,
    client: DiavgeiaClient | None = None,
) -> DiavgeiaSource:
    return DiavgeiaSource(config=config or get_diavgeia_config(), client=client)
