import asyncio
import json

import httpx
import pytest

from eventops.config import settings
from eventops.errors import GatewayUnavailable
from eventops.models.domain import Coordinates, GeocodeResult
from eventops.services.geo import GeoapifyClient, StrictGeocoder, check_health, resolve_address


def _client(handler, **kwargs) -> GeoapifyClient:
    return GeoapifyClient(
        api_key="test-key",
        base_url="https://geo.test",
        max_retries=kwargs.pop("max_retries", 0),
        backoff_seconds=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _feature_collection(properties: dict, geometry: dict | None = None) -> dict:
    return {"type": "FeatureCollection", "features": [{"properties": properties, "geometry": geometry}]}


def test_geocode_returns_first_feature():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json=_feature_collection(
                {"formatted": "Ipoh, Perak, Malaysia"},
                {"type": "Point", "coordinates": [101.09, 4.59]},
            ),
        )

    result = asyncio.run(_client(handler).geocode("Ipoh"))

    assert result is not None
    assert (result.lat, result.lon) == (4.59, 101.09)
    assert result.formatted == "Ipoh, Perak, Malaysia"
    assert seen["path"] == "/v1/geocode/search"
    assert seen["params"] == {"text": "Ipoh", "limit": "1", "apiKey": "test-key"}


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(404, json={"error": "not found"}),
        httpx.Response(200, content=b"<html>oops</html>"),
        httpx.Response(200, json={"features": []}),
        httpx.Response(200, json=["not", "an", "object"]),
    ],
)
def test_geocode_failures_return_none(response):
    client = _client(lambda request: response)

    assert asyncio.run(client.geocode("Somewhere")) is None


def test_geocode_retries_server_errors():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503)

    result = asyncio.run(_client(handler, max_retries=2).geocode("Ipoh"))

    assert result is None
    assert len(calls) == 3


def test_geocode_blank_address_skips_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert asyncio.run(_client(handler).geocode("   ")) is None


def test_geocode_strict_raises_when_upstream_is_down():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    client = _client(handler, max_retries=1)

    with pytest.raises(GatewayUnavailable) as excinfo:
        asyncio.run(client.geocode_strict("Ipoh"))
    assert "HTTP 503" in str(excinfo.value)
    assert asyncio.run(client.geocode("Ipoh")) is None


def test_geocode_strict_returns_none_for_no_match():
    client = _client(lambda request: httpx.Response(200, json={"features": []}))

    assert asyncio.run(client.geocode_strict("Nowhere")) is None


def test_resolve_address_prefers_strict_lookup():
    class LenientOnly:
        async def geocode(self, address):
            return GeocodeResult(lat=1.0, lon=2.0, formatted=address)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    assert isinstance(_client(handler), StrictGeocoder)
    assert not isinstance(LenientOnly(), StrictGeocoder)
    with pytest.raises(GatewayUnavailable):
        asyncio.run(resolve_address(_client(handler), "Ipoh"))
    assert asyncio.run(resolve_address(LenientOnly(), "Ipoh")).formatted == "Ipoh"


def test_route_parses_legs_and_waypoints():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json=_feature_collection(
                {
                    "distance": 12345,
                    "time": 1250,
                    "legs": [{"distance": 10000, "time": 1000}, {"distance": 2345, "time": 250}],
                },
                {"type": "MultiLineString", "coordinates": []},
            ),
        )

    waypoints = [Coordinates(4.5, 101.0), Coordinates(4.6, 101.1), Coordinates(4.5, 101.0)]
    result = asyncio.run(_client(handler).route(waypoints, mode="truck"))

    assert seen["params"]["waypoints"] == "4.5,101.0|4.6,101.1|4.5,101.0"
    assert seen["params"]["mode"] == "truck"
    assert result.distance_meters == 12345
    assert [leg.duration_seconds for leg in result.legs] == [1000, 250]
    assert result.geometry == {"type": "MultiLineString", "coordinates": []}


def test_route_failures_raise_gateway_unavailable():
    waypoints = [Coordinates(4.5, 101.0), Coordinates(4.6, 101.1)]

    with pytest.raises(GatewayUnavailable) as excinfo:
        asyncio.run(_client(lambda request: httpx.Response(400)).route(waypoints))
    assert excinfo.value.gateway == "routing"

    with pytest.raises(GatewayUnavailable):
        asyncio.run(_client(lambda request: httpx.Response(200, json={"features": []})).route(waypoints))


def test_route_requires_two_waypoints():
    with pytest.raises(ValueError):
        asyncio.run(_client(lambda request: httpx.Response(200)).route([Coordinates(4.5, 101.0)]))


def test_route_network_error_raises_after_retries():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GatewayUnavailable) as excinfo:
        asyncio.run(
            _client(handler, max_retries=1).route([Coordinates(4.5, 101.0), Coordinates(4.6, 101.1)])
        )
    assert "network error" in str(excinfo.value)


@pytest.mark.parametrize(
    "properties, street, full",
    [
        ({"street": "Jalan Raja", "name": "Mall", "formatted": "Jalan Raja, Ipoh"}, "Jalan Raja", "Jalan Raja, Ipoh"),
        ({"name": "Taman Ria", "district": "Lahat"}, "Taman Ria", "Taman Ria"),
        ({"district": "Lahat"}, "Lahat", "Lahat"),
        ({}, "Unknown street", "Unknown street"),
    ],
)
def test_reverse_geocode_fallbacks(properties, street, full):
    client = _client(lambda request: httpx.Response(200, json=_feature_collection(properties)))

    result = asyncio.run(client.reverse_geocode(4.59, 101.09))

    assert result.street_name == street
    assert result.full_address == full


def test_missing_api_key_is_rejected(monkeypatch):
    monkeypatch.setattr(settings, "geoapify_api_key", None)

    with pytest.raises(ValueError, match="not configured"):
        GeoapifyClient()


def test_check_health_uses_geocoding():
    body = json.dumps(
        _feature_collection({"formatted": "Ipoh"}, {"type": "Point", "coordinates": [101.09, 4.59]})
    )
    healthy = _client(lambda request: httpx.Response(200, content=body.encode()))
    unhealthy = _client(lambda request: httpx.Response(401))

    assert asyncio.run(check_health(healthy)) is True
    assert asyncio.run(check_health(unhealthy)) is False
