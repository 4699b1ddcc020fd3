"""Geocoding configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, ResilienceConfig

GOOGLE_GEOCODING_URL = "https://maps.googleapis.com/maps/api/geocode/"
GEOCODE_PATH = "json"


@dataclass(frozen=True, slots=True)
class GeocodingConfig:
    api_key: str
    resilience: ResilienceConfig
    region: str = "gr"
    path: str = GEOCODE_PATH


def get_geocoding_config() -> GeocodingConfig | None:
    """Return geocoding settings, or ``None`` when no API key is configured."""

    api_key = optional_env_var("GOOGLE_API_KEY")
    if api_key is None:
        return None
    return GeocodingConfig(
        api_key=api_key,
        resilience=ResilienceConfig(
            name="geocoding",
            base_url=GOOGLE_GEOCODING_URL,
            timeout_seconds=10.0,
            cache=CacheConfig(backend="memory"),
        ),
    )
