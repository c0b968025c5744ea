"""Day schedule orchestration: orders -> tasks -> team journeys -> conflict report."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ...errors import GatewayUnavailable, ScheduleCancelled, UnresolvedAddress
from ...models.domain import Coordinates, Order, TeamDaySchedule, TimelineEvent
from ...models.settings import SchedulingConfig
from ..geo.geoapify_client import Geocoder, Router, resolve_address
from .conflicts import ConflictReport, detect_conflicts
from .extractor import extract_tasks_for_date, group_tasks_by_team
from .journey import build_team_day_schedule, failed_schedule
from .timeline import build_timeline_events

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DayScheduleReport:
    date: str
    schedules: list[TeamDaySchedule]
    conflicts: ConflictReport
    timeline: dict[str, list[TimelineEvent]] = field(default_factory=dict)
    hub_coordinates: Optional[Coordinates] = None
    metadata: dict = field(default_factory=dict)
    config: SchedulingConfig = field(default_factory=SchedulingConfig)


def _team_order(config: SchedulingConfig, teams: Iterable[str]) -> list[str]:
    present = set(teams)
    configured = [team.id for team in config.teams if team.id in present]
    return configured + sorted(present.difference(configured))


async def _locate_hub(geocoder: Geocoder, address: str, timeout: Optional[float]) -> Coordinates:
    try:
        result = await asyncio.wait_for(resolve_address(geocoder, address), timeout)
    except asyncio.TimeoutError as exc:
        raise ScheduleCancelled(f"Timed out geocoding hub address {address!r}") from exc
    if result is None:
        raise UnresolvedAddress(address)
    return result.coordinates


async def build_day_schedules(
    orders: Iterable[Order],
    date: str,
    config: SchedulingConfig,
    *,
    geocoder: Geocoder,
    router: Router,
    teams: Optional[Sequence[str]] = None,
    mode: str = "drive",
    timeout: Optional[float] = None,
) -> DayScheduleReport:
    """Compute every team's itinerary for ``date`` and cross-check the rosters.

    Teams are computed concurrently and independently. A team that fails, or
    is still pending when ``timeout`` elapses, keeps its raw task list and
    carries an error instead of a journey; the others are unaffected.
    """

    grouped = group_tasks_by_team(extract_tasks_for_date(orders, date, config.hub_address))
    if teams:
        grouped = {team: tasks for team, tasks in grouped.items() if team in set(teams)}
    ordered_teams = _team_order(config, grouped)
    metadata: dict = {"task_count": sum(len(tasks) for tasks in grouped.values()), "mode": mode}

    if not ordered_teams:
        return DayScheduleReport(date=date, schedules=[], conflicts=ConflictReport(), metadata=metadata, config=config)

    hub: Optional[Coordinates] = None
    try:
        hub = await _locate_hub(geocoder, config.hub_address, timeout)
    except (UnresolvedAddress, GatewayUnavailable, ScheduleCancelled) as exc:
        logger.warning(f"Hub lookup failed for {date}: {exc}")
        schedules = [
            failed_schedule(team, date, grouped[team], config, exc) for team in ordered_teams
        ]
    else:
        schedules = await _run_teams(grouped, ordered_teams, date, config, hub, geocoder, router, mode, timeout)

    conflicts = detect_conflicts(schedules, config, hub_coordinates=hub)
    metadata["failed_teams"] = [schedule.team for schedule in schedules if schedule.error]
    return DayScheduleReport(
        date=date,
        schedules=schedules,
        conflicts=conflicts,
        timeline={schedule.team: build_timeline_events(schedule) for schedule in schedules},
        hub_coordinates=hub,
        metadata=metadata,
        config=config,
    )


async def _run_teams(
    grouped: dict,
    ordered_teams: list[str],
    date: str,
    config: SchedulingConfig,
    hub: Coordinates,
    geocoder: Geocoder,
    router: Router,
    mode: str,
    timeout: Optional[float],
) -> list[TeamDaySchedule]:
    jobs = {
        team: asyncio.create_task(
            build_team_day_schedule(
                team,
                date,
                grouped[team],
                config,
                geocoder=geocoder,
                router=router,
                hub_coordinates=hub,
                mode=mode,
            )
        )
        for team in ordered_teams
    }
    try:
        _, pending = await asyncio.wait(jobs.values(), timeout=timeout)
    except asyncio.CancelledError:
        for job in jobs.values():
            job.cancel()
        raise

    for job in pending:
        job.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    schedules: list[TeamDaySchedule] = []
    for team in ordered_teams:
        job = jobs[team]
        if job.cancelled():
            error: Exception = ScheduleCancelled(f"Journey for {team} was not computed before the deadline")
        elif job.exception() is not None:
            error = job.exception()
            logger.error(f"Unexpected failure computing {team} on {date}: {error!r}")
        else:
            schedules.append(job.result())
            continue
        schedules.append(failed_schedule(team, date, grouped[team], config, error))
    return schedules
