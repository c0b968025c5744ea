import asyncio
import csv
import io
import json
from pathlib import Path
from typing import Optional

from eventops.errors import GatewayUnavailable
from eventops.models.domain import Coordinates, GeocodeResult, Order, RouteLeg, RouteResult, SalesConfig, TaskSchedule
from eventops.models.settings import SchedulingConfig, TeamConfig
from eventops.persistence.filesystem import FileStorage
from eventops.services.outputs import day_report_to_csv, day_report_to_json, persist_day_report
from eventops.services.scheduling import build_day_schedules

HUB = "HUB"
DATE = "2025-03-01"
CONFIG = SchedulingConfig(hub_address=HUB)

POINTS = {
    HUB: Coordinates(4.60, 101.05),
    "Site A": Coordinates(4.61, 101.06),
    "Site B": Coordinates(4.62, 101.07),
    "Slow Site": Coordinates(4.63, 101.08),
}


class StubGeocoder:
    async def geocode(self, address: str) -> Optional[GeocodeResult]:
        if address == "Slow Site":
            await asyncio.sleep(5)
        point = POINTS.get(address)
        if point is None:
            return None
        return GeocodeResult(lat=point.lat, lon=point.lon, formatted=address)


class StubRouter:
    async def route(self, waypoints, mode="drive") -> RouteResult:
        count = len(waypoints) - 1
        return RouteResult(
            distance_meters=4000 * count,
            duration_seconds=900 * count,
            legs=[RouteLeg(4000, 900) for _ in range(count)],
        )


def _order(number: str, team: str, site: str, start: str = "10:00", end: str = "11:00") -> Order:
    return Order(
        order_number=number,
        config=SalesConfig(),
        customer_name=f"Customer {number}",
        delivery_address=site,
        setup=TaskSchedule(date=DATE, team=team, start_time=start, end_time=end),
    )


def _run(orders, **kwargs):
    return asyncio.run(
        build_day_schedules(orders, DATE, CONFIG, geocoder=StubGeocoder(), router=StubRouter(), **kwargs)
    )


def test_failed_team_does_not_affect_siblings():
    orders = [
        _order("SO-1", "Team A", "Site A"),
        _order("SO-2", "Team B", "Nowhere"),
        _order("SO-3", "Team C", "Site B"),
    ]

    report = _run(orders)

    by_team = {schedule.team: schedule for schedule in report.schedules}
    assert [schedule.team for schedule in report.schedules] == ["Team A", "Team B", "Team C"]
    assert by_team["Team A"].journey is not None
    assert by_team["Team C"].journey is not None
    assert by_team["Team B"].journey is None
    assert by_team["Team B"].error_code == "unresolved-address"
    assert by_team["Team B"].failed_address == "Nowhere"
    assert [task.order_number for task in by_team["Team B"].tasks] == ["SO-2"]
    assert report.metadata["failed_teams"] == ["Team B"]
    assert report.hub_coordinates == POINTS[HUB]


def test_pending_teams_are_cancelled_at_deadline():
    orders = [_order("SO-1", "Team A", "Site A"), _order("SO-2", "Team B", "Slow Site")]

    report = _run(orders, timeout=0.2)

    by_team = {schedule.team: schedule for schedule in report.schedules}
    assert by_team["Team A"].journey is not None
    assert by_team["Team B"].error_code == "cancelled"
    assert [task.order_number for task in by_team["Team B"].tasks] == ["SO-2"]


def test_unresolvable_hub_fails_every_team():
    config = SchedulingConfig(hub_address="Unknown Hub")

    report = asyncio.run(
        build_day_schedules(
            [_order("SO-1", "Team A", "Site A")], DATE, config, geocoder=StubGeocoder(), router=StubRouter()
        )
    )

    [schedule] = report.schedules
    assert schedule.error_code == "unresolved-address"
    assert schedule.failed_address == "Unknown Hub"
    assert report.hub_coordinates is None


def test_team_filter_and_unknown_teams():
    orders = [
        _order("SO-1", "Team A", "Site A"),
        _order("SO-2", "Team Z", "Site B", start="12:00", end="12:30"),
        _order("SO-3", "Team B", "Site B"),
    ]

    report = _run(orders, teams=["Team Z", "Team A"])

    assert [schedule.team for schedule in report.schedules] == ["Team A", "Team Z"]
    assert report.schedules[1].color == "#6b7280"


def test_no_tasks_gives_empty_report():
    report = _run([_order("SO-1", "Team A", "Site A")], teams=["Team E"])

    assert report.schedules == []
    assert report.metadata["task_count"] == 0


def test_report_includes_conflicts_and_timeline():
    orders = [
        _order("SO-1", "Team A", "Site A", start="10:00", end="11:00"),
        _order("SO-2", "Team A", "Site B", start="10:30", end="11:30"),
    ]

    report = _run(orders)

    assert len(report.conflicts.hard_conflicts) == 1
    events = report.timeline["Team A"]
    assert events[0].id == "SO-1-setup-depart-hub"
    assert events[0].time == "09:45"
    assert events[1].id == "SO-1-setup-arrive-site-start"
    assert [event.type for event in events].count("task-end") == 2
    times = [event.time for event in events]
    assert times == sorted(times)


def test_day_report_serialisation_and_persistence(tmp_path: Path):
    report = _run([_order("SO-1", "Team A", "Site A")])

    payload = day_report_to_json(report)
    assert payload["schedules"][0]["tasks"][0]["key"] == "SO-1-setup"
    assert payload["schedules"][0]["journey"]["waypoints"][1]["task_key"] == "SO-1-setup"
    assert payload["conflicts"]["has_hard_conflicts"] is False

    rows = list(csv.DictReader(io.StringIO(day_report_to_csv(report))))
    assert {row["team"] for row in rows} == {"Team A"}

    run_dir = persist_day_report(report, FileStorage(root=tmp_path))
    assert run_dir.parent == tmp_path.resolve() / "outputs"
    assert run_dir.name.startswith(f"schedules_{DATE}_")
    summary = json.loads((run_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["date"] == DATE
    assert (run_dir / "timeline.csv").exists()


class UnreachableGeocoder(StubGeocoder):
    async def geocode_strict(self, address: str) -> Optional[GeocodeResult]:
        raise GatewayUnavailable("geocoding", "upstream returned HTTP 503")


def test_unreachable_geocoder_is_reported_as_gateway_failure():
    report = asyncio.run(
        build_day_schedules(
            [_order("SO-1", "Team A", "Site A")], DATE, CONFIG, geocoder=UnreachableGeocoder(), router=StubRouter()
        )
    )

    [schedule] = report.schedules
    assert schedule.error_code == "gateway-unavailable"
    assert schedule.failed_address is None
    assert "HTTP 503" in schedule.error


def test_report_echoes_configuration_and_team_names():
    config = SchedulingConfig(
        hub_address=HUB,
        minutes_per_km=2.5,
        teams=(TeamConfig(id="Team A", name="Alpha", color="#ef4444", leader="Aminah", members=("Ben", "Chong")),),
    )
    orders = [_order("SO-1", "Team A", "Site A"), _order("SO-2", "Team B", "Nowhere")]

    report = asyncio.run(build_day_schedules(orders, DATE, config, geocoder=StubGeocoder(), router=StubRouter()))
    payload = day_report_to_json(report)

    assert [schedule.team_name for schedule in report.schedules] == ["Alpha", "Team B"]
    assert payload["schedules"][0]["team_name"] == "Alpha"
    assert payload["schedules"][1]["team_name"] == "Team B"
    echoed = payload["configuration"]
    assert echoed["hub_address"] == HUB
    assert echoed["minutes_per_km"] == 2.5
    assert echoed["buffer_time_minutes"] == 30
    assert echoed["waiting_hours"] == 1.5
    assert echoed["inventory_task_times"]["tent-10x10"] == {"setup_mins": 30, "dismantle_mins": 20}
    assert echoed["teams"] == [
        {"id": "Team A", "name": "Alpha", "color": "#ef4444", "leader": "Aminah", "members": ["Ben", "Chong"]}
    ]
