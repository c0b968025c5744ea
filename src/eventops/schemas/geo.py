"""Geocoding and routing schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

TravelMode = Literal["drive", "truck", "light_truck"]


class GeocodeResponse(BaseModel):
    address: str
    lat: float
    lon: float
    formatted: str


class ReverseGeocodeResponse(BaseModel):
    street_name: str
    full_address: str


class WaypointInput(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class RouteRequest(BaseModel):
    waypoints: List[WaypointInput] = Field(..., min_length=2)
    mode: Optional[TravelMode] = None


class RouteLegModel(BaseModel):
    distance_km: float
    duration_minutes: int


class RouteResponse(BaseModel):
    distance_km: float
    duration_minutes: int
    legs: List[RouteLegModel]
    geometry: Optional[dict] = None


class DistanceRequest(BaseModel):
    from_address: str = Field(..., min_length=1)
    to_address: str = Field(..., min_length=1)
    mode: Optional[TravelMode] = None


class DistanceResponse(BaseModel):
    from_address: GeocodeResponse
    to_address: GeocodeResponse
    distance_km: float
    distance_meters: float
    duration_minutes: int
    duration_seconds: float
