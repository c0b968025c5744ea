"""Field dispatch scheduling: task extraction, journeys, conflicts."""

from .conflicts import ConflictReport, Overlap, RejectedTask, ScheduleWarning, detect_conflicts
from .extractor import (
    dates_with_tasks,
    extract_tasks_for_date,
    group_tasks_by_team,
    sort_tasks_by_time,
)
from .journey import build_journey, build_team_day_schedule
from .service import DayScheduleReport, build_day_schedules
from .timeline import build_timeline_events

__all__ = [
    "ConflictReport",
    "Overlap",
    "RejectedTask",
    "ScheduleWarning",
    "detect_conflicts",
    "dates_with_tasks",
    "extract_tasks_for_date",
    "group_tasks_by_team",
    "sort_tasks_by_time",
    "build_journey",
    "build_team_day_schedule",
    "DayScheduleReport",
    "build_day_schedules",
    "build_timeline_events",
]
