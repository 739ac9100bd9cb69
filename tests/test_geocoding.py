import asyncio

import httpx
import pytest

from routedraw.config import Settings
from routedraw.errors import GeocodingFailed
from routedraw.models.domain import GeoPoint
from routedraw.services.geocoding import NominatimGeocoder


def _geocoder(handler) -> NominatimGeocoder:
    return NominatimGeocoder(
        base_url="http://geocoder.test",
        transport=httpx.MockTransport(handler),
        config=Settings(_env_file=None),
    )


def test_geocode_returns_candidates_in_order():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"lat": "40.7127281", "lon": "-74.0060152", "display_name": "New York, United States"},
                {"lat": "43.0", "lon": "-75.5", "display_name": "New York State, United States"},
            ],
        )

    candidates = asyncio.run(_geocoder(handler).geocode("  New York "))

    assert [c.formatted_address for c in candidates] == ["New York, United States", "New York State, United States"]
    assert candidates[0].point == GeoPoint(40.7127281, -74.0060152)
    assert seen[0].url.path == "/search"
    assert seen[0].url.params["q"] == "New York"
    assert seen[0].url.params["format"] == "jsonv2"


def test_geocode_skips_malformed_items():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"display_name": "no coords"}, {"lat": "1", "lon": "2"}])

    candidates = asyncio.run(_geocoder(handler).geocode("somewhere"))

    assert len(candidates) == 1
    assert candidates[0].formatted_address == "somewhere"


def test_geocode_empty_result_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    with pytest.raises(GeocodingFailed):
        asyncio.run(_geocoder(handler).geocode("atlantis"))


def test_geocode_http_error_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    with pytest.raises(GeocodingFailed):
        asyncio.run(_geocoder(handler).geocode("paris"))


def test_geocode_blank_query_fails_without_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(GeocodingFailed):
        asyncio.run(_geocoder(handler).geocode("   "))
