import asyncio

import httpx
import pytest

from routedraw.config import Settings
from routedraw.errors import RoutingLookupFailed
from routedraw.models.domain import DistanceProvenance, GeoPoint
from routedraw.services import geospatial
from routedraw.services.routing.adapter import RouteFindingAdapter
from routedraw.services.routing.osrm_client import OSRMClient, check_health

PATH = [GeoPoint(40.0, -74.0), GeoPoint(40.01, -74.0), GeoPoint(40.01, -74.02), GeoPoint(40.03, -74.02)]


class DummyRouting:
    def __init__(self, per_segment: float = 1500.0, fail_on: set[int] | None = None):
        self.per_segment = per_segment
        self.fail_on = fail_on or set()
        self.calls: list[tuple[GeoPoint, GeoPoint]] = []
        self.active = 0
        self.max_active = 0

    async def route_distance(self, origin, destination):
        self.calls.append((origin, destination))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0)
            if len(self.calls) in self.fail_on:
                raise RoutingLookupFailed("ZERO_RESULTS")
            return self.per_segment
        finally:
            self.active -= 1


def test_path_distance_sums_routed_segments_sequentially():
    backend = DummyRouting()
    estimate = asyncio.run(RouteFindingAdapter(backend).path_distance(PATH))

    assert estimate.meters == 4500.0
    assert estimate.provenance is DistanceProvenance.ROUTED
    assert backend.calls == list(zip(PATH, PATH[1:]))
    assert backend.max_active == 1


def test_any_failed_segment_falls_back_for_whole_path():
    backend = DummyRouting(fail_on={2})
    estimate = asyncio.run(RouteFindingAdapter(backend).path_distance(PATH))

    assert estimate.provenance is DistanceProvenance.STRAIGHT_LINE
    assert estimate.meters == pytest.approx(geospatial.path_distance(PATH))
    # lookups stop at the first failure
    assert len(backend.calls) == 2


def test_every_segment_failing_matches_straight_line():
    backend = DummyRouting(fail_on={1, 2, 3})
    estimate = asyncio.run(RouteFindingAdapter(backend).path_distance(PATH))

    assert estimate.meters == pytest.approx(geospatial.path_distance(PATH))


def test_disabled_adapter_never_calls_backend():
    backend = DummyRouting()
    estimate = asyncio.run(RouteFindingAdapter(backend, enabled=False).path_distance(PATH))

    assert backend.calls == []
    assert estimate.provenance is DistanceProvenance.STRAIGHT_LINE


def test_short_path_is_zero_without_lookups():
    backend = DummyRouting()
    estimate = asyncio.run(RouteFindingAdapter(backend).path_distance(PATH[:1]))

    assert estimate.meters == 0.0
    assert backend.calls == []


def _osrm(handler, **kwargs) -> OSRMClient:
    options = {"max_retries": 0, "backoff_seconds": 0.0}
    options.update(kwargs)
    return OSRMClient(
        base_url="http://osrm.test",
        transport=httpx.MockTransport(handler),
        config=Settings(_env_file=None),
        **options,
    )


def _route_distance(client: OSRMClient) -> float:
    async def run():
        try:
            return await client.route_distance(PATH[0], PATH[1])
        finally:
            await client.aclose()

    return asyncio.run(run())


def test_osrm_client_parses_route_distance():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 1234.5, "duration": 90.0}]})

    client = _osrm(handler, api_key="secret")

    assert _route_distance(client) == 1234.5
    request = seen[0]
    assert request.url.path == "/route/v1/driving/-74.0,40.0;-74.0,40.01"
    assert request.url.params["overview"] == "false"
    assert request.url.params["key"] == "secret"


def test_osrm_client_omits_key_when_not_configured():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 10.0}]})

    _route_distance(_osrm(handler, api_key=""))

    assert "key" not in seen[0].url.params


def test_osrm_client_error_code_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"code": "NoRoute", "message": "Impossible route between points"})

    with pytest.raises(RoutingLookupFailed, match="Impossible route"):
        _route_distance(_osrm(handler))


def test_osrm_client_retries_http_errors_then_fails():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, json={"message": "busy"})

    with pytest.raises(RoutingLookupFailed):
        _route_distance(_osrm(handler, max_retries=2))
    assert len(calls) == 3


def test_osrm_client_recovers_after_transient_error():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(502)
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 42.0}]})

    assert _route_distance(_osrm(handler, max_retries=1)) == 42.0


@pytest.mark.parametrize("error", [httpx.ConnectError("refused"), httpx.ReadTimeout("slow")])
def test_osrm_client_network_failures_raise_lookup_failed(error):
    def handler(request: httpx.Request) -> httpx.Response:
        raise error

    with pytest.raises(RoutingLookupFailed):
        _route_distance(_osrm(handler))


def test_adapter_with_failing_osrm_falls_back():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused")

    client = _osrm(handler)

    async def run():
        try:
            return await RouteFindingAdapter(client).path_distance(PATH)
        finally:
            await client.aclose()

    estimate = asyncio.run(run())

    assert estimate.provenance is DistanceProvenance.STRAIGHT_LINE
    assert estimate.meters == pytest.approx(geospatial.path_distance(PATH))


def test_health_check_uses_configured_profile_and_key():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.params.get("key") != "secret":
            return httpx.Response(401, json={"message": "missing key"})
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 1500.0}]})

    config = Settings(_env_file=None, routing_api_key="secret")
    healthy = asyncio.run(check_health("http://osrm.test", transport=httpx.MockTransport(handler), config=config))

    assert healthy is True
    assert seen[0].url.path.startswith(f"/route/v1/{config.osrm_profile}/")


def test_health_check_reports_rejected_key():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "invalid key"})

    config = Settings(_env_file=None, routing_api_key="wrong")

    assert asyncio.run(check_health("http://osrm.test", transport=httpx.MockTransport(handler), config=config)) is False
