"""Geocoding, reverse geocoding and routing endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from ...config import settings
from ...errors import UnresolvedAddress
from ...models.domain import Coordinates, GeocodeResult
from ...schemas.geo import (
    DistanceRequest,
    DistanceResponse,
    GeocodeResponse,
    ReverseGeocodeResponse,
    RouteLegModel,
    RouteRequest,
    RouteResponse,
)
from ...services.geo import calculate_distance
from ...services.timeutils import meters_to_km, seconds_to_minutes
from .. import deps

router = APIRouter(prefix="/geo", tags=["geo"])


def _geocode_response(address: str, result: GeocodeResult) -> GeocodeResponse:
    return GeocodeResponse(address=address, lat=result.lat, lon=result.lon, formatted=result.formatted)


@router.get("/geocode", response_model=GeocodeResponse, status_code=status.HTTP_200_OK)
async def geocode(address: str = Query(..., min_length=1)) -> GeocodeResponse:
    client = deps.get_geo_client()
    try:
        result = await client.geocode(address)
        if result is None:
            raise UnresolvedAddress(address)
    except Exception as exc:
        raise deps.to_http_error(exc, "geocode address") from exc
    return _geocode_response(address, result)


@router.get("/reverse", response_model=ReverseGeocodeResponse, status_code=status.HTTP_200_OK)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
) -> ReverseGeocodeResponse:
    client = deps.get_geo_client()
    try:
        result = await client.reverse_geocode(lat, lon)
    except Exception as exc:
        raise deps.to_http_error(exc, "reverse geocode") from exc
    return ReverseGeocodeResponse(street_name=result.street_name, full_address=result.full_address)


@router.post("/route", response_model=RouteResponse, status_code=status.HTTP_200_OK)
async def route(payload: RouteRequest) -> RouteResponse:
    client = deps.get_geo_client()
    waypoints = [Coordinates(lat=point.lat, lon=point.lon) for point in payload.waypoints]
    try:
        result = await client.route(waypoints, mode=payload.mode or settings.routing_mode)
    except Exception as exc:
        raise deps.to_http_error(exc, "calculate route") from exc
    return RouteResponse(
        distance_km=meters_to_km(result.distance_meters),
        duration_minutes=seconds_to_minutes(result.duration_seconds),
        legs=[
            RouteLegModel(
                distance_km=meters_to_km(leg.distance_meters),
                duration_minutes=seconds_to_minutes(leg.duration_seconds),
            )
            for leg in result.legs
        ],
        geometry=result.geometry,
    )


@router.post("/distance", response_model=DistanceResponse, status_code=status.HTTP_200_OK)
async def distance(payload: DistanceRequest) -> DistanceResponse:
    client = deps.get_geo_client()
    try:
        result = await calculate_distance(
            payload.from_address,
            payload.to_address,
            geocoder=client,
            router=client,
            mode=payload.mode or settings.routing_mode,
        )
    except Exception as exc:
        raise deps.to_http_error(exc, "calculate distance") from exc
    return DistanceResponse(
        from_address=_geocode_response(payload.from_address, result.origin),
        to_address=_geocode_response(payload.to_address, result.destination),
        distance_km=result.distance_km,
        distance_meters=result.distance_meters,
        duration_minutes=result.duration_minutes,
        duration_seconds=result.duration_seconds,
    )
