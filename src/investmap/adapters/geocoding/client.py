"""Google Geocoding API client implementing the ``Geocoder`` port."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from investmap.adapters.http_resilience import ResilientClient
from investmap.domain.ports import GeoPoint

from .schema import GeocodeResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from investmap.config.geocoding import GeocodingConfig
    from investmap.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


class GoogleGeocoder:
    """Resolve free-text addresses to coordinates; any failure yields ``None``."""

    def __init__(
        self,
        *,
        config: GeocodingConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    async def __call__(self, text: str) -> GeoPoint | None:
        params = {"address": text, "key": self._config.api_key, "region": self._config.region}
        try:
            async with self._client_factory(self._resilience) as client:
                response = await client.get(self._config.path, params=params)
            response.raise_for_status()
            payload = GeocodeResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as exc:
            log.warning("Geocoding request failed for %r: %s", text[:50], exc)
            return None

        if payload.status != "OK" or not payload.results:
            log.debug("Geocoding status %s for %r", payload.status, text[:50])
            if payload.error_message:
                log.warning("Geocoding error: %s", payload.error_message)
            return None
        location = payload.results[0].geometry.location
        return GeoPoint(lat=location.lat, lng=location.lng)
