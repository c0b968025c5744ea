"""Team journey construction: hub -> site(s) -> hub with computed timestamps."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Optional, Sequence

from ...errors import GatewayUnavailable, JourneyExceedsDay, SchedulingError, UnresolvedAddress
from ...models.domain import (
    Coordinates,
    RouteLeg,
    RouteResult,
    ScheduledTask,
    TeamDaySchedule,
    TeamJourney,
    Waypoint,
)
from ...models.settings import FALLBACK_TEAM_COLOR, SchedulingConfig
from ..geo.geoapify_client import Geocoder, Router, resolve_address
from ..timeutils import (
    MINUTES_PER_DAY,
    format_minutes,
    meters_to_km,
    parse_hhmm,
    round_half_up,
    seconds_to_minutes,
)
from .extractor import sort_tasks_by_time

logger = logging.getLogger(__name__)

DEFAULT_DAY_START = 8 * 60


async def _resolve(geocoder: Geocoder, address: str) -> Coordinates:
    if not address or not address.strip():
        raise UnresolvedAddress(address)
    result = await resolve_address(geocoder, address)
    if result is None:
        raise UnresolvedAddress(address)
    return result.coordinates


async def _resolve_sites(
    geocoder: Geocoder,
    tasks: Sequence[ScheduledTask],
    hub_address: str,
    hub_coordinates: Optional[Coordinates],
) -> tuple[Coordinates, list[Coordinates]]:
    async def site(task: ScheduledTask) -> Coordinates:
        if task.coordinates is not None:
            return task.coordinates
        return await _resolve(geocoder, task.site_address)

    async def hub() -> Coordinates:
        if hub_coordinates is not None:
            return hub_coordinates
        return await _resolve(geocoder, hub_address)

    hub_point, *sites = await asyncio.gather(hub(), *(site(task) for task in tasks))
    return hub_point, sites


async def _route_legs(
    router: Router,
    points: Sequence[Coordinates],
    labels: Sequence[str],
    mode: str,
) -> tuple[list[RouteLeg], Optional[dict]]:
    """Legs for the ordered path, one multi-waypoint query if the router itemises legs."""

    expected = len(points) - 1
    try:
        route = await router.route(points, mode=mode)
    except GatewayUnavailable as exc:
        raise GatewayUnavailable("routing", exc.detail, leg=(labels[0], labels[-1])) from exc
    if len(route.legs) == expected:
        return list(route.legs), route.geometry

    logger.debug(f"Router returned {len(route.legs)} legs for {expected}; routing leg by leg")

    async def single(index: int) -> RouteResult:
        try:
            return await router.route([points[index], points[index + 1]], mode=mode)
        except GatewayUnavailable as exc:
            raise GatewayUnavailable("routing", exc.detail, leg=(labels[index], labels[index + 1])) from exc

    results = await asyncio.gather(*(single(index) for index in range(expected)))
    legs = [RouteLeg(distance_meters=r.distance_meters, duration_seconds=r.duration_seconds) for r in results]
    geometries = [r.geometry for r in results if r.geometry]
    geometry = {"type": "GeometryCollection", "geometries": geometries} if geometries else None
    return legs, geometry


def _hub_departure(first: ScheduledTask, first_leg_mins: int, day_start: int) -> int:
    """Back-compute hub departure from the first task's required on-site time."""

    for value in (first.task_start_time, first.arrival_time):
        anchor = parse_hhmm(value)
        if anchor is not None:
            return max(0, anchor - first_leg_mins)
    departure = parse_hhmm(first.departure_time)
    return departure if departure is not None else day_start


def _work_minutes(task: ScheduledTask) -> int:
    start = parse_hhmm(task.task_start_time)
    end = parse_hhmm(task.task_end_time)
    if start is None or end is None or end < start:
        return 0
    return end - start


def _leg_minutes(leg: RouteLeg, minutes_per_km: float) -> int:
    """Routed leg duration, estimated from distance when the router reports none."""

    minutes = seconds_to_minutes(leg.duration_seconds)
    if minutes == 0 and leg.distance_meters > 0 and minutes_per_km > 0:
        return int(round_half_up(leg.distance_meters / 1000 * minutes_per_km))
    return minutes


def _same_day(team: str, date: str, minutes: int) -> int:
    if minutes >= MINUTES_PER_DAY:
        raise JourneyExceedsDay(team, date, format_minutes(minutes))
    return minutes


async def build_journey(
    team: str,
    date: str,
    tasks: Sequence[ScheduledTask],
    hub_address: str,
    *,
    geocoder: Geocoder,
    router: Router,
    color: str = FALLBACK_TEAM_COLOR,
    hub_coordinates: Optional[Coordinates] = None,
    mode: str = "drive",
    day_start: int = DEFAULT_DAY_START,
    minutes_per_km: float = 0,
) -> tuple[TeamJourney, Optional[dict]]:
    """Build the itinerary for one team on one day.

    Raises :class:`UnresolvedAddress`, :class:`GatewayUnavailable` or
    :class:`JourneyExceedsDay`; there is no partial journey. Returns the
    journey and the raw route geometry.

    The returned tasks carry the computed itinerary times (hub departure,
    site arrival, site departure, hub return) in place of the order form's
    estimates. The task start and end stay as booked.
    """

    ordered = sort_tasks_by_time(tasks)
    if not ordered:
        return TeamJourney(team, color, date, [], [], 0.0, 0), None

    hub_point, sites = await _resolve_sites(geocoder, ordered, hub_address, hub_coordinates)
    points = [hub_point, *sites, hub_point]
    labels = [hub_address, *(task.site_address for task in ordered), hub_address]
    legs, geometry = await _route_legs(router, points, labels, mode)
    leg_mins = [_leg_minutes(leg, minutes_per_km) for leg in legs]

    hub_departure = _hub_departure(ordered[0], leg_mins[0], day_start)
    clock = hub_departure
    stops: list[tuple[ScheduledTask, Coordinates, int, int]] = []
    for index, (task, point) in enumerate(zip(ordered, sites)):
        arrival = _same_day(team, date, clock + leg_mins[index])
        start = parse_hhmm(task.task_start_time)
        begin = max(arrival, start) if start is not None else arrival
        departure = _same_day(team, date, begin + _work_minutes(task))
        stops.append((task, point, arrival, departure))
        clock = departure
    hub_return = _same_day(team, date, clock + leg_mins[-1])

    waypoints = [
        Waypoint("hub", hub_address, hub_point, format_minutes(hub_departure), format_minutes(hub_departure))
    ]
    resolved_tasks: list[ScheduledTask] = []
    previous_address = hub_address
    for index, (task, point, arrival, departure) in enumerate(stops):
        first, last = index == 0, index == len(stops) - 1
        resolved = replace(
            task,
            coordinates=point,
            departure_from_type="hub" if first else "other",
            departure_from_address=previous_address,
            departure_time=format_minutes(hub_departure) if first else "",
            arrival_time=format_minutes(arrival),
            outbound_distance_km=meters_to_km(legs[index].distance_meters),
            outbound_travel_mins=leg_mins[index],
            return_departure_time=format_minutes(departure),
            hub_arrival_time=format_minutes(hub_return) if last else "",
            return_distance_km=meters_to_km(legs[index + 1].distance_meters),
            return_travel_mins=leg_mins[index + 1],
        )
        resolved_tasks.append(resolved)
        waypoints.append(
            Waypoint("site", task.site_address, point, format_minutes(arrival), format_minutes(departure), resolved)
        )
        previous_address = task.site_address
    waypoints.append(Waypoint("hub", hub_address, hub_point, format_minutes(hub_return), format_minutes(hub_return)))

    journey = TeamJourney(
        team=team,
        color=color,
        date=date,
        waypoints=waypoints,
        tasks=resolved_tasks,
        total_distance_km=meters_to_km(sum(leg.distance_meters for leg in legs)),
        total_duration_mins=sum(leg_mins),
    )
    return journey, geometry


def failed_schedule(
    team: str, date: str, tasks: Sequence[ScheduledTask], config: SchedulingConfig, error: Exception
) -> TeamDaySchedule:
    """A roster entry carrying the raw tasks and the reason no itinerary exists."""

    return TeamDaySchedule(
        team=team,
        color=config.team_color(team),
        date=date,
        tasks=sort_tasks_by_time(tasks),
        team_name=config.team_name(team),
        error=str(error) or error.__class__.__name__,
        error_code=getattr(error, "code", "unexpected-error"),
        failed_address=getattr(error, "address", None),
    )


async def build_team_day_schedule(
    team: str,
    date: str,
    tasks: Sequence[ScheduledTask],
    config: SchedulingConfig,
    *,
    geocoder: Geocoder,
    router: Router,
    hub_coordinates: Optional[Coordinates] = None,
    mode: str = "drive",
) -> TeamDaySchedule:
    """Journey builder boundary: gateway failures become a per-team error value."""

    color = config.team_color(team)
    try:
        journey, geometry = await build_journey(
            team,
            date,
            tasks,
            config.hub_address,
            geocoder=geocoder,
            router=router,
            color=color,
            hub_coordinates=hub_coordinates,
            mode=mode,
            day_start=config.work_window[0],
            minutes_per_km=config.minutes_per_km,
        )
    except SchedulingError as exc:
        logger.warning(f"Journey for {team} on {date} failed: {exc}")
        return failed_schedule(team, date, tasks, config, exc)

    return TeamDaySchedule(
        team=team,
        color=color,
        date=date,
        tasks=journey.tasks,
        team_name=config.team_name(team),
        journey=journey,
        route_geometry=geometry,
    )
