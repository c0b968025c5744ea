"""Scheduling configuration consumed by the journey and conflict components."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any

from ..services.timeutils import parse_hhmm

DEFAULT_HUB_ADDRESS = (
    "2A, PERSIARAN KILANG PENGKALAN 28, KAWASAN PERINDUSTRIAN PENGKALAN MAJU LAHAT, 31500 Ipoh, Perak"
)
FALLBACK_TEAM_COLOR = "#6b7280"

_HEX_COLOR = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)


@dataclass(slots=True, frozen=True)
class InventoryTaskTimes:
    setup_mins: float
    dismantle_mins: float


@dataclass(slots=True, frozen=True)
class TeamConfig:
    id: str
    name: str
    color: str
    leader: str = ""
    members: tuple[str, ...] = ()


DEFAULT_INVENTORY_TASK_TIMES: dict[str, InventoryTaskTimes] = {
    "tent-10x10": InventoryTaskTimes(30, 20),
    "tent-20x20": InventoryTaskTimes(35, 25),
    "tent-20x30": InventoryTaskTimes(40, 30),
    "table-set": InventoryTaskTimes(8, 8),
    "long-table": InventoryTaskTimes(8, 8),
    "long-table-skirting": InventoryTaskTimes(16, 12),
    "extra-chair": InventoryTaskTimes(2, 4),
    "cooler-fan": InventoryTaskTimes(10, 10),
}

DEFAULT_TEAMS: tuple[TeamConfig, ...] = (
    TeamConfig(id="Team A", name="Team A", color="#ef4444"),
    TeamConfig(id="Team B", name="Team B", color="#f59e0b"),
    TeamConfig(id="Team C", name="Team C", color="#3b82f6"),
    TeamConfig(id="Team D", name="Team D", color="#22c55e"),
    TeamConfig(id="Team E", name="Team E", color="#8b5cf6"),
)


@dataclass(slots=True, frozen=True)
class SchedulingConfig:
    """Explicit scheduling configuration, loaded once per request."""

    hub_address: str = DEFAULT_HUB_ADDRESS
    work_start_time: str = "08:00"
    work_end_time: str = "16:30"
    lunch_start_time: str = "13:00"
    lunch_end_time: str = "14:00"
    inventory_task_times: dict[str, InventoryTaskTimes] = field(
        default_factory=lambda: dict(DEFAULT_INVENTORY_TASK_TIMES)
    )
    buffer_time_minutes: float = 30
    minutes_per_km: float = 3
    radius_km: float = 10
    waiting_hours: float = 1.5
    teams: tuple[TeamConfig, ...] = DEFAULT_TEAMS

    def team(self, team_id: str) -> TeamConfig | None:
        for team in self.teams:
            if team.id == team_id:
                return team
        return None

    def team_color(self, team_id: str) -> str:
        team = self.team(team_id)
        return team.color if team and team.color else FALLBACK_TEAM_COLOR

    def team_name(self, team_id: str) -> str:
        team = self.team(team_id)
        return team.name if team and team.name else team_id

    @property
    def work_window(self) -> tuple[int, int]:
        return _window(self.work_start_time, self.work_end_time)

    @property
    def lunch_window(self) -> tuple[int, int]:
        return _window(self.lunch_start_time, self.lunch_end_time)


def _window(start: str, end: str) -> tuple[int, int]:
    start_mins = parse_hhmm(start)
    end_mins = parse_hhmm(end)
    if start_mins is None or end_mins is None:
        raise ValueError(f"Invalid time window {start!r}-{end!r}")
    return start_mins, end_mins


def _as_number(value: Any, fallback: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    return value if math.isfinite(value) else fallback


def _as_string(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


def _as_time(value: Any, fallback: str) -> str:
    candidate = _as_string(value, fallback)
    return candidate if parse_hhmm(candidate) is not None else fallback


def _as_color(value: Any, fallback: str) -> str:
    candidate = _as_string(value, fallback)
    return candidate if _HEX_COLOR.match(candidate) else fallback


def _normalize_task_times(value: Any) -> dict[str, InventoryTaskTimes]:
    out = dict(DEFAULT_INVENTORY_TASK_TIMES)
    if not isinstance(value, dict):
        return out
    for item_id, raw in value.items():
        if not isinstance(raw, dict):
            continue
        current = out.get(item_id)
        setup = _as_number(raw.get("setupMins"), current.setup_mins if current else 0)
        dismantle = _as_number(raw.get("dismantleMins"), current.dismantle_mins if current else setup)
        out[item_id] = InventoryTaskTimes(setup_mins=max(0, setup), dismantle_mins=max(0, dismantle))
    return out


def _normalize_teams(value: Any) -> tuple[TeamConfig, ...]:
    if not isinstance(value, list):
        return DEFAULT_TEAMS
    defaults = {team.id: team for team in DEFAULT_TEAMS}
    by_id: dict[str, TeamConfig] = {}
    for item in value:
        if not isinstance(item, dict) or item.get("id") not in defaults:
            continue
        default = defaults[item["id"]]
        members = item.get("members")
        by_id[default.id] = TeamConfig(
            id=default.id,
            name=_as_string(item.get("name"), default.name),
            color=_as_color(item.get("color"), default.color),
            leader=item["leader"].strip() if isinstance(item.get("leader"), str) else "",
            members=tuple(
                member.strip() for member in members if isinstance(member, str) and member.strip()
            )
            if isinstance(members, list)
            else (),
        )
    return tuple(by_id.get(team.id, team) for team in DEFAULT_TEAMS)


def normalize_scheduling_config(raw: Any) -> SchedulingConfig:
    """Build a config from a stored settings document, defaulting per key."""

    document = raw if isinstance(raw, dict) else {}
    app = document.get("app") if isinstance(document.get("app"), dict) else {}
    ai = document.get("ai") if isinstance(document.get("ai"), dict) else {}
    base = SchedulingConfig()

    return SchedulingConfig(
        hub_address=_as_string(ai.get("hubAddress"), base.hub_address),
        work_start_time=_as_time(app.get("workStartTime"), base.work_start_time),
        work_end_time=_as_time(app.get("workEndTime"), base.work_end_time),
        lunch_start_time=_as_time(app.get("lunchStartTime"), base.lunch_start_time),
        lunch_end_time=_as_time(app.get("lunchEndTime"), base.lunch_end_time),
        inventory_task_times=_normalize_task_times(app.get("inventoryTaskTimesById")),
        buffer_time_minutes=_as_number(ai.get("bufferTimeMinutes"), base.buffer_time_minutes),
        minutes_per_km=_as_number(ai.get("minutesPerKm"), base.minutes_per_km),
        radius_km=_as_number(ai.get("radiusKm"), base.radius_km),
        waiting_hours=_as_number(ai.get("waitingHours"), base.waiting_hours),
        teams=_normalize_teams(document.get("teams")),
    )
