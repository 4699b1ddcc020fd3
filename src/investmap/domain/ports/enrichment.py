"""Port definitions for location enrichment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lng: float


@runtime_checkable
class Geocoder(Protocol):
    async def __call__(self, text: str) -> GeoPoint | None: ...


__all__ = ["GeoPoint", "Geocoder"]
