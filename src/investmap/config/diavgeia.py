"""Diavgeia (primary source) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

DIAVGEIA_BASE_URL = "https://diavgeia.gov.gr/luminapi/api"
MINISTRY_OF_DEVELOPMENT_UID = "100081597"
STRATEGIC_INVESTMENTS_UNIT_UID = "100007316"


@dataclass(frozen=True, slots=True)
class DiavgeiaConfig:
    resilience: ResilienceConfig
    organization_uid: str = MINISTRY_OF_DEVELOPMENT_UID
    unit_uid: str = STRATEGIC_INVESTMENTS_UNIT_UID
    page_size: int = 100
    max_pages: int = 10
    default_lookback_years: int = 10


def get_diavgeia_config() -> DiavgeiaConfig:
    return DiavgeiaConfig(
        resilience=ResilienceConfig(
            name="diavgeia",
            base_url=DIAVGEIA_BASE_URL,
            timeout_seconds=30.0,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            cache=CacheConfig(backend="memory"),
            default_headers={"Accept": "application/json"},
        )
    )
