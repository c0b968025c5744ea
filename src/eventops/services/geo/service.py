"""Point-to-point distance lookups built on the geocoding and routing gateways."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from ...errors import UnresolvedAddress
from ...models.domain import GeocodeResult
from ..timeutils import meters_to_km, seconds_to_minutes
from .geoapify_client import Geocoder, Router, resolve_address


@dataclass(slots=True)
class DistanceResult:
    origin: GeocodeResult
    destination: GeocodeResult
    distance_km: float
    distance_meters: float
    duration_minutes: int
    duration_seconds: float


async def calculate_distance(
    from_address: str,
    to_address: str,
    *,
    geocoder: Geocoder,
    router: Router,
    mode: str = "drive",
) -> DistanceResult:
    origin, destination = await asyncio.gather(
        resolve_address(geocoder, from_address),
        resolve_address(geocoder, to_address),
    )
    if origin is None:
        raise UnresolvedAddress(from_address)
    if destination is None:
        raise UnresolvedAddress(to_address)

    route = await router.route([origin.coordinates, destination.coordinates], mode=mode)
    return DistanceResult(
        origin=origin,
        destination=destination,
        distance_km=meters_to_km(route.distance_meters),
        distance_meters=route.distance_meters,
        duration_minutes=seconds_to_minutes(route.duration_seconds),
        duration_seconds=route.duration_seconds,
    )
