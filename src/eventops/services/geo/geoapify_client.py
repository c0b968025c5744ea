"""Async HTTP client for the Geoapify geocoding and routing services."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

import httpx

from ...config import settings
from ...errors import GatewayUnavailable
from ...models.domain import (
    Coordinates,
    GeocodeResult,
    ReverseGeocodeResult,
    RouteLeg,
    RouteResult,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class Geocoder(Protocol):
    async def geocode(self, address: str) -> Optional[GeocodeResult]: ...


@runtime_checkable
class StrictGeocoder(Protocol):
    """A geocoder that can report upstream failures instead of folding them into ``None``."""

    async def geocode_strict(self, address: str) -> Optional[GeocodeResult]: ...


class Router(Protocol):
    async def route(self, waypoints: Sequence[Coordinates], mode: str = "drive") -> RouteResult: ...


class GeoapifyClient:
    """Geocoding, reverse geocoding and multi-waypoint routing.

    ``geocode`` never raises: upstream failures and empty results both come
    back as ``None``. ``geocode_strict``, ``route`` and ``reverse_geocode``
    raise :class:`GatewayUnavailable` once retries are exhausted.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        max_parallel_requests: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.geoapify_api_key
        if not self.api_key:
            raise ValueError("Geoapify API key is not configured.")
        self.base_url = (base_url or settings.geoapify_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.geoapify_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.geoapify_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.geoapify_backoff_seconds
        self._semaphore = asyncio.Semaphore(max_parallel_requests or settings.max_parallel_requests)
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"accept": "application/json"},
            transport=self._transport,
        )

    async def _get_json(self, path: str, params: dict[str, Any], gateway: str) -> dict:
        url = f"{self.base_url}{path}"
        query = {**params, "apiKey": self.api_key}
        attempt = 0
        async with self._semaphore:
            async with self._get_client() as client:
                while True:
                    try:
                        response = await client.get(url, params=query)
                        response.raise_for_status()
                        data = response.json()
                        if not isinstance(data, dict):
                            raise GatewayUnavailable(gateway, "unexpected response payload")
                        return data
                    except httpx.HTTPStatusError as exc:
                        status_code = exc.response.status_code
                        attempt += 1
                        if status_code not in RETRYABLE_STATUS_CODES or attempt > self.max_retries:
                            raise GatewayUnavailable(gateway, f"upstream returned HTTP {status_code}") from exc
                        await asyncio.sleep(self.backoff_seconds * attempt)
                    except (httpx.TimeoutException, httpx.TransportError) as exc:
                        attempt += 1
                        if attempt > self.max_retries:
                            logger.warning(f"{gateway} request failed after {self.max_retries} retries: {exc}")
                            raise GatewayUnavailable(gateway, f"network error: {exc}") from exc
                        wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                        logger.debug(
                            f"{gateway} request error, retrying in {wait_time:.1f}s "
                            f"(attempt {attempt}/{self.max_retries}): {exc}"
                        )
                        await asyncio.sleep(wait_time)
                    except ValueError as exc:
                        raise GatewayUnavailable(gateway, "malformed JSON response") from exc

    async def geocode(self, address: str) -> Optional[GeocodeResult]:
        try:
            return await self.geocode_strict(address)
        except GatewayUnavailable as exc:
            logger.warning(f"Geocoding failed for {address!r}: {exc}")
            return None

    async def geocode_strict(self, address: str) -> Optional[GeocodeResult]:
        """Like :meth:`geocode`, but raises :class:`GatewayUnavailable` on upstream failure.

        ``None`` then only means the provider answered without a match.
        """
        if not address or not address.strip():
            return None
        data = await self._get_json("/v1/geocode/search", {"text": address, "limit": 1}, "geocoding")
        return parse_geocode_feature(data, address)

    async def reverse_geocode(self, lat: float, lon: float) -> ReverseGeocodeResult:
        data = await self._get_json("/v1/geocode/reverse", {"lat": lat, "lon": lon}, "geocoding")
        features = data.get("features") or [{}]
        props = (features[0] or {}).get("properties") or {}
        street_name = props.get("street") or props.get("name") or props.get("district") or "Unknown street"
        return ReverseGeocodeResult(street_name=street_name, full_address=props.get("formatted") or street_name)

    async def route(self, waypoints: Sequence[Coordinates], mode: str = "drive") -> RouteResult:
        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required for routing.")
        params = {
            "waypoints": "|".join(f"{point.lat},{point.lon}" for point in waypoints),
            "mode": mode,
        }
        data = await self._get_json("/v1/routing", params, "routing")
        return parse_route_feature(data)


def parse_geocode_feature(data: dict, address: str) -> Optional[GeocodeResult]:
    try:
        feature = (data.get("features") or [])[0]
        lon, lat = feature["geometry"]["coordinates"][:2]
        formatted = (feature.get("properties") or {}).get("formatted") or address
        return GeocodeResult(lat=float(lat), lon=float(lon), formatted=formatted)
    except (IndexError, KeyError, TypeError, ValueError):
        return None


async def resolve_address(geocoder: Geocoder, address: str) -> Optional[GeocodeResult]:
    """Geocode, letting :class:`GatewayUnavailable` through when the geocoder can report it."""

    if isinstance(geocoder, StrictGeocoder):
        return await geocoder.geocode_strict(address)
    return await geocoder.geocode(address)


def parse_route_feature(data: dict) -> RouteResult:
    features = data.get("features") or []
    if not features:
        raise GatewayUnavailable("routing", "no route found between waypoints")
    feature = features[0] or {}
    props = feature.get("properties") or {}
    try:
        legs = [
            RouteLeg(
                distance_meters=float(leg.get("distance") or 0),
                duration_seconds=float(leg.get("time") or 0),
            )
            for leg in props.get("legs") or []
        ]
        return RouteResult(
            distance_meters=float(props.get("distance") or 0),
            duration_seconds=float(props.get("time") or 0),
            legs=legs,
            geometry=feature.get("geometry"),
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise GatewayUnavailable("routing", "malformed route payload") from exc


async def check_health(client: GeoapifyClient | None = None) -> bool:
    """Geocode a well-known address to confirm the provider is reachable and keyed."""

    try:
        gateway = client or GeoapifyClient()
        result = await gateway.geocode("Ipoh, Perak, Malaysia")
        return result is not None
    except ValueError:
        return False
