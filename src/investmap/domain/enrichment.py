"""Domain services for location enrichment."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from investmap.domain.model import Investment, Location
    from investmap.domain.ports import Geocoder

log = getLogger(__name__)


@dataclass(slots=True)
class GeocodingResult:
    investments: list[Investment]
    attempted: int = 0
    geocoded: int = 0


def _needs_coordinates(location: Location) -> bool:
    return bool(location.text_location) and not location.has_coordinates


async def enrich_locations(
    investments: Sequence[Investment],
    *,
    geocode: Geocoder,
    delay_seconds: float = 0.2,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> GeocodingResult:
    """Geocode locations that have an address but no coordinates.

    Lookups run one at a time with a fixed delay before each, to stay within the
    geocoding quota.
    """

    result = GeocodingResult(investments=[])
    for investment in investments:
        if not any(_needs_coordinates(location) for location in investment.locations):
            result.investments.append(investment)
            continue

        locations: list[Location] = []
        for location in investment.locations:
            text = location.text_location
            if not text or location.has_coordinates:
                locations.append(location)
                continue
            result.attempted += 1
            await sleep(delay_seconds)
            point = await geocode(text)
            if point is None:
                log.info("Failed to geocode %r", text[:50])
                locations.append(location)
                continue
            result.geocoded += 1
            locations.append(replace(location, lat=point.lat, lon=point.lng))
        result.investments.append(replace(investment, locations=tuple(locations)))

    log.info(
        "Geocoding summary: %s/%s locations geocoded", result.geocoded, result.attempted
    )
    return result


__all__ = ["GeocodingResult", "enrich_locations"]
