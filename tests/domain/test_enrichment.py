from __future__ import annotations

import asyncio

from investmap.domain.enrichment import enrich_locations
from investmap.domain.model import Location
from investmap.domain.ports import GeoPoint
from tests.helpers.fakes import FakeGeocoder, RecordingSleep
from tests.helpers.records import make_investment


def test_only_locations_without_coordinates_are_geocoded() -> None:
    geocoder = FakeGeocoder({"Chania, Crete, Greece": GeoPoint(lat=35.5, lng=24.0)})
    sleep = RecordingSleep()
    record = make_investment(
        code="ADA1",
        locations=(
            Location("Hotel", text_location="Chania, Crete, Greece"),
            Location("Marina", text_location="Souda", lat=35.4, lon=24.1),
            Location("Unknown place"),
            Location("Villas", text_location="Nowhere"),
        ),
    )

    result = asyncio.run(
        enrich_locations([record], geocode=geocoder, delay_seconds=0.2, sleep=sleep)
    )

    locations = result.investments[0].locations
    assert geocoder.calls == ["Chania, Crete, Greece", "Nowhere"]
    assert (locations[0].lat, locations[0].lon) == (35.5, 24.0)
    assert (locations[1].lat, locations[1].lon) == (35.4, 24.1)
    assert not locations[3].has_coordinates
    assert sleep.delays == [0.2, 0.2]
    assert (result.attempted, result.geocoded) == (2, 1)


def test_records_without_pending_locations_are_untouched() -> None:
    record = make_investment(code="ADA1")

    result = asyncio.run(
        enrich_locations([record], geocode=FakeGeocoder(), sleep=RecordingSleep())
    )

    assert result.investments == [record]
    assert result.attempted == 0
