"""Domain models for orders, field tasks and team journeys."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Union

TaskType = Literal["setup", "dismantle", "other-adhoc"]
DepartureOrigin = Literal["hub", "other"]
WaypointKind = Literal["hub", "site"]


@dataclass(slots=True, frozen=True)
class SalesConfig:
    """Fixed fulfillment sequence; only the dismantle step is optional."""

    dismantle_required: bool = True


@dataclass(slots=True, frozen=True)
class AdHocConfig:
    """Per-order flags selecting which field phases an ad-hoc order goes through."""

    requires_packing: bool = True
    requires_setup: bool = True
    requires_dismantle: bool = True
    requires_other_adhoc: bool = False


OrderConfig = Union[SalesConfig, AdHocConfig]


@dataclass(slots=True)
class TaskSchedule:
    """Scheduling fields captured for one task type of an order."""

    date: str = ""
    team: str = ""
    departure_from_type: DepartureOrigin = "hub"
    departure_address: str = ""
    departure_time: str = ""
    travel_hours: int = 0
    travel_minutes: int = 0
    destination_address: str = ""
    start_time: str = ""
    end_time: str = ""
    distance_km: float = 0.0
    return_arrival_time: str = ""
    return_distance_km: float = 0.0
    return_travel_mins: int = 0


@dataclass(slots=True)
class Order:
    """An event order as seen by the fulfillment flow and the dispatcher."""

    order_number: str
    config: OrderConfig
    status: str = "scheduling"
    customer_name: str = "Unknown"
    delivery_address: str = ""
    setup: Optional[TaskSchedule] = None
    dismantle: Optional[TaskSchedule] = None
    other_adhoc: Optional[TaskSchedule] = None

    @property
    def order_source(self) -> str:
        return "ad-hoc" if isinstance(self.config, AdHocConfig) else "sales"


@dataclass(slots=True, frozen=True)
class Coordinates:
    lat: float
    lon: float


@dataclass(slots=True)
class ScheduledTask:
    """One unit of field work derived from an order for a given day."""

    order_number: str
    customer_name: str
    task_type: TaskType
    team: str
    site_address: str
    coordinates: Optional[Coordinates]
    departure_from_type: DepartureOrigin
    departure_from_address: str
    departure_time: str
    arrival_time: str
    task_start_time: str
    task_end_time: str
    outbound_distance_km: float
    outbound_travel_mins: int
    return_departure_time: str
    hub_arrival_time: str
    return_distance_km: float
    return_travel_mins: int

    @property
    def key(self) -> str:
        return f"{self.order_number}-{self.task_type}"


@dataclass(slots=True)
class Waypoint:
    kind: WaypointKind
    address: str
    coordinates: Coordinates
    arrival_time: str
    departure_time: str
    task: Optional[ScheduledTask] = None


@dataclass(slots=True)
class TeamJourney:
    team: str
    color: str
    date: str
    waypoints: list[Waypoint]
    tasks: list[ScheduledTask]
    total_distance_km: float
    total_duration_mins: int


@dataclass(slots=True)
class TeamDaySchedule:
    """Request-scoped aggregate for one team on one date."""

    team: str
    color: str
    date: str
    tasks: list[ScheduledTask]
    team_name: str = ""
    journey: Optional[TeamJourney] = None
    route_geometry: Optional[dict] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    failed_address: Optional[str] = None


@dataclass(slots=True)
class TimelineEvent:
    id: str
    time: str
    type: str
    label: str
    team: str
    color: str
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    address: Optional[str] = None


@dataclass(slots=True)
class GeocodeResult:
    lat: float
    lon: float
    formatted: str

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lon=self.lon)


@dataclass(slots=True)
class ReverseGeocodeResult:
    street_name: str
    full_address: str


@dataclass(slots=True)
class RouteLeg:
    distance_meters: float
    duration_seconds: float


@dataclass(slots=True)
class RouteResult:
    distance_meters: float
    duration_seconds: float
    legs: list[RouteLeg] = field(default_factory=list)
    geometry: Optional[dict] = None
