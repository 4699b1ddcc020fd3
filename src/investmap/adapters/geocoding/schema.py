"""Pydantic models for Google Geocoding API responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GeocodingBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class LatLng(GeocodingBaseModel):
    lat: float
    lng: float


class Geometry(GeocodingBaseModel):
    location: LatLng


class GeocodeResult(GeocodingBaseModel):
    formatted_address: str | None = None
    geometry: Geometry


class GeocodeResponse(GeocodingBaseModel):
    status: str
    results: list[GeocodeResult] = Field(default_factory=list["GeocodeResult"])
    error_message: str | None = None
