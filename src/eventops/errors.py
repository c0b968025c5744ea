"""Error taxonomy shared by the gateway client and the scheduling services."""

from __future__ import annotations

from typing import Optional


class SchedulingError(Exception):
    """Base class for failures surfaced by the dispatch scheduler."""

    code = "scheduling-error"


class GatewayUnavailable(SchedulingError):
    """An upstream geocoding/routing call failed (network, non-2xx, bad payload)."""

    code = "gateway-unavailable"

    def __init__(self, gateway: str, detail: str, *, leg: Optional[tuple[str, str]] = None) -> None:
        self.gateway = gateway
        self.detail = detail
        self.leg = leg
        message = f"{gateway} gateway unavailable: {detail}"
        if leg:
            message += f" (leg {leg[0]} -> {leg[1]})"
        super().__init__(message)


class UnresolvedAddress(SchedulingError):
    """The geocoder was reached but returned no match for an address."""

    code = "unresolved-address"

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Could not geocode address: {address!r}")


class ScheduleCancelled(SchedulingError):
    """A team computation was abandoned because the request deadline passed."""

    code = "cancelled"


class JourneyExceedsDay(SchedulingError):
    """The computed itinerary runs past midnight of the scheduled day."""

    code = "journey-exceeds-day"

    def __init__(self, team: str, date: str, at: str) -> None:
        self.team = team
        self.date = date
        self.at = at
        super().__init__(f"Journey for {team} on {date} runs past 24:00 ({at})")


class MalformedTime(SchedulingError, ValueError):
    """A time field is not a valid 24h ``HH:MM`` (optionally ``:SS``) string."""

    code = "malformed-time"

    def __init__(self, value: object, field: Optional[str] = None) -> None:
        self.value = value
        self.field = field
        where = f" in {field}" if field else ""
        super().__init__(f"Malformed time{where}: {value!r}")
