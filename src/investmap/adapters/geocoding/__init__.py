"""Geocoding adapter."""

from __future__ import annotations

from investmap.config.geocoding import get_geocoding_config

from .client import GoogleGeocoder


def build_geocoder() -> GoogleGeocoder | None:
    """Geocoder from the environment, or ``None`` when no API key is set."""

    config = get_geocoding_config()
    if config is None:
        return None
    return GoogleGeocoder(config=config)


__all__ = ["GoogleGeocoder", "build_geocoder"]
