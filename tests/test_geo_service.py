import asyncio

import pytest

from eventops.errors import GatewayUnavailable, UnresolvedAddress
from eventops.models.domain import GeocodeResult, RouteResult
from eventops.services.geo import calculate_distance
from eventops.services.geospatial import haversine_km
from eventops.services.timeutils import format_minutes, meters_to_km, parse_hhmm, seconds_to_minutes


class StubGeocoder:
    async def geocode(self, address):
        if address == "Nowhere":
            return None
        return GeocodeResult(lat=4.6, lon=101.0 + len(address) / 100, formatted=address.upper())


class StubRouter:
    def __init__(self):
        self.waypoints = None

    async def route(self, waypoints, mode="drive"):
        self.waypoints = list(waypoints)
        return RouteResult(distance_meters=12_349, duration_seconds=89)


def test_calculate_distance_rounds_for_display():
    router = StubRouter()

    result = asyncio.run(calculate_distance("Ipoh", "Lahat", geocoder=StubGeocoder(), router=router))

    assert result.distance_km == 12.3
    assert result.duration_minutes == 1
    assert result.origin.formatted == "IPOH"
    assert len(router.waypoints) == 2


def test_calculate_distance_names_unresolved_address():
    with pytest.raises(UnresolvedAddress) as excinfo:
        asyncio.run(calculate_distance("Ipoh", "Nowhere", geocoder=StubGeocoder(), router=StubRouter()))

    assert excinfo.value.address == "Nowhere"


class OfflineGeocoder(StubGeocoder):
    async def geocode_strict(self, address):
        raise GatewayUnavailable("geocoding", "network error: timed out")


def test_calculate_distance_surfaces_geocoder_outage():
    with pytest.raises(GatewayUnavailable):
        asyncio.run(calculate_distance("Ipoh", "Lahat", geocoder=OfflineGeocoder(), router=StubRouter()))


@pytest.mark.parametrize(
    "value, expected",
    [("9:05", 545), ("09:05", 545), ("23:59:59", 1439), ("24:00", None), ("9:5", None), ("", None), (None, None)],
)
def test_parse_hhmm(value, expected):
    assert parse_hhmm(value) == expected


def test_rounding_and_formatting():
    assert meters_to_km(1250) == 1.3
    assert meters_to_km(1249) == 1.2
    assert seconds_to_minutes(90) == 2
    assert seconds_to_minutes(89) == 1
    assert format_minutes(24 * 60 + 15) == "00:15"


def test_haversine_known_distance():
    # Ipoh to Kuala Lumpur, roughly 170 km as the crow flies
    assert 160 < haversine_km(4.5975, 101.0901, 3.1390, 101.6869) < 180
