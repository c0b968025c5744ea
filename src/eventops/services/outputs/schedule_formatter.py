"""Serializers for day schedule outputs."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from ...models.domain import Coordinates, ScheduledTask, TeamDaySchedule, TeamJourney
from ...models.settings import SchedulingConfig
from ...persistence.filesystem import FileStorage
from ..scheduling.service import DayScheduleReport


def _coordinates(point: Optional[Coordinates]) -> Optional[dict]:
    return {"lat": point.lat, "lon": point.lon} if point is not None else None


def task_to_json(task: ScheduledTask) -> dict:
    payload = asdict(task)
    payload["key"] = task.key
    payload["coordinates"] = _coordinates(task.coordinates)
    return payload


def journey_to_json(journey: TeamJourney) -> dict:
    return {
        "team": journey.team,
        "color": journey.color,
        "date": journey.date,
        "total_distance_km": journey.total_distance_km,
        "total_duration_mins": journey.total_duration_mins,
        "waypoints": [
            {
                "kind": waypoint.kind,
                "address": waypoint.address,
                "coordinates": _coordinates(waypoint.coordinates),
                "arrival_time": waypoint.arrival_time,
                "departure_time": waypoint.departure_time,
                "task_key": waypoint.task.key if waypoint.task else None,
            }
            for waypoint in journey.waypoints
        ],
    }


def scheduling_config_to_json(config: SchedulingConfig) -> dict:
    """The configuration a report was computed under, keyed as stored."""

    return {
        "hub_address": config.hub_address,
        "work_start_time": config.work_start_time,
        "work_end_time": config.work_end_time,
        "lunch_start_time": config.lunch_start_time,
        "lunch_end_time": config.lunch_end_time,
        "buffer_time_minutes": config.buffer_time_minutes,
        "minutes_per_km": config.minutes_per_km,
        "radius_km": config.radius_km,
        "waiting_hours": config.waiting_hours,
        "inventory_task_times": {
            item_id: {"setup_mins": times.setup_mins, "dismantle_mins": times.dismantle_mins}
            for item_id, times in config.inventory_task_times.items()
        },
        "teams": [
            {
                "id": team.id,
                "name": team.name,
                "color": team.color,
                "leader": team.leader,
                "members": list(team.members),
            }
            for team in config.teams
        ],
    }


def team_schedule_to_json(schedule: TeamDaySchedule) -> dict:
    return {
        "team": schedule.team,
        "team_name": schedule.team_name or schedule.team,
        "color": schedule.color,
        "date": schedule.date,
        "tasks": [task_to_json(task) for task in schedule.tasks],
        "journey": journey_to_json(schedule.journey) if schedule.journey else None,
        "route_geometry": schedule.route_geometry,
        "error": schedule.error,
        "error_code": schedule.error_code,
        "failed_address": schedule.failed_address,
    }


def day_report_to_json(report: DayScheduleReport) -> dict:
    return {
        "date": report.date,
        "hub_coordinates": _coordinates(report.hub_coordinates),
        "metadata": report.metadata,
        "configuration": scheduling_config_to_json(report.config),
        "schedules": [team_schedule_to_json(schedule) for schedule in report.schedules],
        "conflicts": {
            "has_hard_conflicts": report.conflicts.has_hard_conflicts,
            "hard_conflicts": [asdict(item) for item in report.conflicts.hard_conflicts],
            "warnings": [asdict(item) for item in report.conflicts.warnings],
            "rejected": [asdict(item) for item in report.conflicts.rejected],
        },
        "timeline": {team: [asdict(event) for event in events] for team, events in report.timeline.items()},
    }


def day_report_to_csv(report: DayScheduleReport) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "date",
        "team",
        "time",
        "type",
        "label",
        "order_number",
        "customer_name",
        "address",
        "event_id",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for team, events in report.timeline.items():
        for event in events:
            writer.writerow(
                {
                    "date": report.date,
                    "team": team,
                    "time": event.time,
                    "type": event.type,
                    "label": event.label,
                    "order_number": event.order_number or "",
                    "customer_name": event.customer_name or "",
                    "address": event.address or "",
                    "event_id": event.id,
                }
            )
    return buffer.getvalue()


def persist_day_report(report: DayScheduleReport, storage: FileStorage | None = None) -> Path:
    """Write ``summary.json`` and ``timeline.csv`` into a fresh run directory."""

    storage = storage or FileStorage()
    run_dir = storage.make_run_directory(prefix=f"schedules_{report.date}")
    storage.write_json(run_dir / "summary.json", day_report_to_json(report))
    storage.write_csv(run_dir / "timeline.csv", day_report_to_csv(report))
    return run_dir
