"""Geocoding and routing gateway."""

from .geoapify_client import GeoapifyClient, Geocoder, Router, StrictGeocoder, check_health, resolve_address
from .service import DistanceResult, calculate_distance

__all__ = [
    "GeoapifyClient",
    "Geocoder",
    "Router",
    "StrictGeocoder",
    "check_health",
    "resolve_address",
    "DistanceResult",
    "calculate_distance",
]
