"""Day schedule request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class DayScheduleRequest(BaseModel):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Calendar day (YYYY-MM-DD).")
    teams: Optional[List[str]] = Field(default=None, description="Restrict the view to these teams.")
    mode: Optional[Literal["drive", "truck", "light_truck"]] = None
    persist: bool = False


class CoordinatesModel(BaseModel):
    lat: float
    lon: float


class ScheduledTaskModel(BaseModel):
    key: str
    order_number: str
    customer_name: str
    task_type: str
    team: str
    site_address: str
    coordinates: Optional[CoordinatesModel] = None
    departure_from_type: str
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


class WaypointModel(BaseModel):
    kind: str
    address: str
    coordinates: CoordinatesModel
    arrival_time: str
    departure_time: str
    task_key: Optional[str] = None


class TeamJourneyModel(BaseModel):
    team: str
    color: str
    date: str
    total_distance_km: float
    total_duration_mins: int
    waypoints: List[WaypointModel]


class TeamDayScheduleModel(BaseModel):
    team: str
    team_name: str = ""
    color: str
    date: str
    tasks: List[ScheduledTaskModel]
    journey: Optional[TeamJourneyModel] = None
    route_geometry: Optional[dict] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    failed_address: Optional[str] = None


class OverlapModel(BaseModel):
    team: str
    first: str
    second: str
    overlap_start: str
    overlap_end: str


class ScheduleWarningModel(BaseModel):
    kind: str
    team: str
    task: str
    message: str


class RejectedTaskModel(BaseModel):
    team: str
    task: str
    field: Optional[str] = None
    value: str
    reason: str


class ConflictReportModel(BaseModel):
    has_hard_conflicts: bool
    hard_conflicts: List[OverlapModel]
    warnings: List[ScheduleWarningModel]
    rejected: List[RejectedTaskModel]


class TaskTimesModel(BaseModel):
    setup_mins: float
    dismantle_mins: float


class TeamConfigModel(BaseModel):
    id: str
    name: str
    color: str
    leader: str = ""
    members: List[str] = Field(default_factory=list)


class SchedulingConfigModel(BaseModel):
    hub_address: str
    work_start_time: str
    work_end_time: str
    lunch_start_time: str
    lunch_end_time: str
    buffer_time_minutes: float
    minutes_per_km: float
    radius_km: float
    waiting_hours: float
    inventory_task_times: Dict[str, TaskTimesModel] = Field(default_factory=dict)
    teams: List[TeamConfigModel] = Field(default_factory=list)


class TimelineEventModel(BaseModel):
    id: str
    time: str
    type: str
    label: str
    team: str
    color: str
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    address: Optional[str] = None


class DayScheduleResponse(BaseModel):
    date: str
    hub_coordinates: Optional[CoordinatesModel] = None
    metadata: dict
    configuration: Optional[SchedulingConfigModel] = None
    schedules: List[TeamDayScheduleModel]
    conflicts: ConflictReportModel
    timeline: Dict[str, List[TimelineEventModel]]
    output_path: Optional[str] = None


class ScheduleDatesResponse(BaseModel):
    dates: List[str]
