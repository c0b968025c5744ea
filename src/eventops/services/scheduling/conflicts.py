"""Schedule conflict detection across the team rosters of one day.

Intervals are half-open ``[start, end)`` in minutes since midnight. Same-team
overlaps are hard conflicts; lunch, working-hour, shared-site and
service-radius findings are soft warnings. Tasks whose times cannot be parsed
are rejected explicitly and left out of every comparison.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from itertools import combinations
from typing import Iterable, Optional, Sequence

from ...errors import MalformedTime
from ...models.domain import Coordinates, ScheduledTask, TeamDaySchedule
from ...models.settings import SchedulingConfig
from ..geospatial import distance_between
from ..timeutils import format_minutes, require_minutes


@dataclass(slots=True)
class Overlap:
    team: str
    first: str
    second: str
    overlap_start: str
    overlap_end: str


@dataclass(slots=True)
class ScheduleWarning:
    kind: str
    team: str
    task: str
    message: str


@dataclass(slots=True)
class RejectedTask:
    team: str
    task: str
    field: Optional[str]
    value: str
    reason: str


@dataclass(slots=True)
class ConflictReport:
    hard_conflicts: list[Overlap] = field(default_factory=list)
    warnings: list[ScheduleWarning] = field(default_factory=list)
    rejected: list[RejectedTask] = field(default_factory=list)

    @property
    def has_hard_conflicts(self) -> bool:
        return bool(self.hard_conflicts)


@dataclass(slots=True)
class _Interval:
    task: ScheduledTask
    start: int
    end: int


def intervals_overlap(s1: int, e1: int, s2: int, e2: int) -> bool:
    return s1 < e2 and s2 < e1


def task_interval(task: ScheduledTask) -> tuple[int, int]:
    """Parse a task's ``[start, end)``; raises :class:`MalformedTime`."""

    start = require_minutes(task.task_start_time, "task_start_time")
    end = require_minutes(task.task_end_time, "task_end_time")
    return start, end


def _normalize_address(address: str) -> str:
    return re.sub(r"\s+", " ", address or "").strip().casefold()


def _collect(
    schedules: Iterable[TeamDaySchedule], report: ConflictReport
) -> dict[str, list[_Interval]]:
    by_team: dict[str, list[_Interval]] = {}
    for schedule in schedules:
        for task in schedule.tasks:
            try:
                start, end = task_interval(task)
            except MalformedTime as exc:
                report.rejected.append(
                    RejectedTask(schedule.team, task.key, exc.field, str(exc.value or ""), str(exc))
                )
                continue
            if end < start:
                report.rejected.append(
                    RejectedTask(
                        schedule.team,
                        task.key,
                        "task_end_time",
                        task.task_end_time,
                        f"Task ends ({task.task_end_time}) before it starts ({task.task_start_time})",
                    )
                )
                continue
            by_team.setdefault(schedule.team, []).append(_Interval(task, start, end))
    return by_team


def _team_overlaps(team: str, intervals: Sequence[_Interval]) -> list[Overlap]:
    overlaps: list[Overlap] = []
    for a, b in combinations(intervals, 2):
        if intervals_overlap(a.start, a.end, b.start, b.end):
            overlaps.append(
                Overlap(
                    team=team,
                    first=a.task.key,
                    second=b.task.key,
                    overlap_start=format_minutes(max(a.start, b.start)),
                    overlap_end=format_minutes(min(a.end, b.end)),
                )
            )
    return overlaps


def _window_warnings(team: str, interval: _Interval, config: SchedulingConfig) -> list[ScheduleWarning]:
    warnings: list[ScheduleWarning] = []
    task = interval.task
    lunch_start, lunch_end = config.lunch_window
    work_start, work_end = config.work_window

    if lunch_end > lunch_start and intervals_overlap(interval.start, interval.end, lunch_start, lunch_end):
        warnings.append(
            ScheduleWarning(
                kind="lunch-overlap",
                team=team,
                task=task.key,
                message=(
                    f"{task.task_start_time}-{task.task_end_time} overlaps lunch "
                    f"{config.lunch_start_time}-{config.lunch_end_time}"
                ),
            )
        )
    if interval.start < work_start or interval.end > work_end:
        warnings.append(
            ScheduleWarning(
                kind="outside-working-hours",
                team=team,
                task=task.key,
                message=(
                    f"{task.task_start_time}-{task.task_end_time} falls outside working hours "
                    f"{config.work_start_time}-{config.work_end_time}"
                ),
            )
        )
    return warnings


def _site_contention(by_team: dict[str, list[_Interval]]) -> list[ScheduleWarning]:
    warnings: list[ScheduleWarning] = []
    flat = [(team, interval) for team, intervals in by_team.items() for interval in intervals]
    for (team_a, a), (team_b, b) in combinations(flat, 2):
        if team_a == team_b:
            continue
        site = _normalize_address(a.task.site_address)
        if not site or site != _normalize_address(b.task.site_address):
            continue
        if intervals_overlap(a.start, a.end, b.start, b.end):
            warnings.append(
                ScheduleWarning(
                    kind="site-contention",
                    team=team_a,
                    task=a.task.key,
                    message=f"{team_a} and {team_b} are both at {a.task.site_address} ({b.task.key})",
                )
            )
    return warnings


def _radius_warnings(
    schedules: Iterable[TeamDaySchedule], config: SchedulingConfig, hub: Coordinates
) -> list[ScheduleWarning]:
    warnings: list[ScheduleWarning] = []
    for schedule in schedules:
        for task in schedule.tasks:
            if task.coordinates is None:
                continue
            distance = distance_between(hub, task.coordinates)
            if distance > config.radius_km:
                warnings.append(
                    ScheduleWarning(
                        kind="outside-service-radius",
                        team=schedule.team,
                        task=task.key,
                        message=f"Site is {distance:.1f} km from the hub (radius {config.radius_km:g} km)",
                    )
                )
    return warnings


def detect_conflicts(
    schedules: Sequence[TeamDaySchedule],
    config: SchedulingConfig,
    *,
    hub_coordinates: Optional[Coordinates] = None,
) -> ConflictReport:
    report = ConflictReport()
    by_team = _collect(schedules, report)

    for team, intervals in by_team.items():
        report.hard_conflicts.extend(_team_overlaps(team, intervals))
        for interval in intervals:
            report.warnings.extend(_window_warnings(team, interval, config))

    report.warnings.extend(_site_contention(by_team))
    if hub_coordinates is not None:
        report.warnings.extend(_radius_warnings(schedules, config, hub_coordinates))
    return report
