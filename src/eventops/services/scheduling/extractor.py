"""Derive field tasks from order schedule data.

Extraction is pure and total: absent or malformed fields become empty strings
and zeroes, never exceptions. Coordinates are left unresolved for the journey
builder to geocode.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ...models.domain import Order, ScheduledTask, TaskSchedule, TaskType
from ..timeutils import MINUTES_PER_DAY, add_minutes, parse_hhmm


def _int(value: object) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _float(value: object) -> float:
    try:
        return float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0


def _travel_task(
    order: Order,
    schedule: TaskSchedule,
    task_type: TaskType,
    hub_address: str,
) -> ScheduledTask:
    departure_from_type = "other" if schedule.departure_from_type == "other" else "hub"
    departure_from_address = schedule.departure_address if departure_from_type == "other" else hub_address
    outbound_travel_mins = _int(schedule.travel_hours) * 60 + _int(schedule.travel_minutes)
    arrival_time = add_minutes(schedule.departure_time, outbound_travel_mins)

    return ScheduledTask(
        order_number=order.order_number,
        customer_name=order.customer_name or "Unknown",
        task_type=task_type,
        team=schedule.team,
        site_address=schedule.destination_address or order.delivery_address or "",
        coordinates=None,
        departure_from_type=departure_from_type,
        departure_from_address=departure_from_address or "",
        departure_time=schedule.departure_time or "",
        arrival_time=arrival_time,
        task_start_time=schedule.start_time or arrival_time,
        task_end_time=schedule.end_time or "",
        outbound_distance_km=_float(schedule.distance_km),
        outbound_travel_mins=outbound_travel_mins,
        return_departure_time=schedule.end_time or "",
        hub_arrival_time=schedule.return_arrival_time or "",
        return_distance_km=_float(schedule.return_distance_km),
        return_travel_mins=_int(schedule.return_travel_mins),
    )


def _other_adhoc_task(order: Order, schedule: TaskSchedule, hub_address: str) -> ScheduledTask:
    return ScheduledTask(
        order_number=order.order_number,
        customer_name=order.customer_name or "Unknown",
        task_type="other-adhoc",
        team=schedule.team,
        site_address=order.delivery_address or "",
        coordinates=None,
        departure_from_type="hub",
        departure_from_address=hub_address,
        departure_time="",
        arrival_time="",
        task_start_time=schedule.start_time or "",
        task_end_time=schedule.end_time or "",
        outbound_distance_km=0.0,
        outbound_travel_mins=0,
        return_departure_time=schedule.end_time or "",
        hub_arrival_time="",
        return_distance_km=0.0,
        return_travel_mins=0,
    )


def _scheduled_on(schedule: Optional[TaskSchedule], date: str) -> bool:
    return bool(schedule and schedule.date and schedule.date == date and schedule.team)


def extract_order_tasks(order: Order, date: str, hub_address: str) -> list[ScheduledTask]:
    """Tasks of one order on ``date``; one per task type that has a team assigned."""

    tasks: list[ScheduledTask] = []
    if _scheduled_on(order.setup, date):
        tasks.append(_travel_task(order, order.setup, "setup", hub_address))
    if _scheduled_on(order.dismantle, date):
        tasks.append(_travel_task(order, order.dismantle, "dismantle", hub_address))
    if _scheduled_on(order.other_adhoc, date):
        tasks.append(_other_adhoc_task(order, order.other_adhoc, hub_address))
    return tasks


def extract_tasks_for_date(orders: Iterable[Order], date: str, hub_address: str) -> list[ScheduledTask]:
    tasks: list[ScheduledTask] = []
    for order in orders:
        tasks.extend(extract_order_tasks(order, date, hub_address))
    return tasks


def group_tasks_by_team(tasks: Iterable[ScheduledTask]) -> dict[str, list[ScheduledTask]]:
    grouped: dict[str, list[ScheduledTask]] = {}
    for task in tasks:
        grouped.setdefault(task.team, []).append(task)
    return grouped


def effective_start_minutes(task: ScheduledTask) -> int:
    """Departure time if set, else task start; unusable times sort after any valid one."""

    for value in (task.departure_time, task.task_start_time):
        if value:
            minutes = parse_hhmm(value)
            if minutes is not None:
                return minutes
    return MINUTES_PER_DAY


def sort_tasks_by_time(tasks: Sequence[ScheduledTask]) -> list[ScheduledTask]:
    return sorted(tasks, key=effective_start_minutes)


def dates_with_tasks(orders: Iterable[Order]) -> set[str]:
    dates: set[str] = set()
    for order in orders:
        for schedule in (order.setup, order.dismantle, order.other_adhoc):
            if schedule and schedule.date and schedule.team:
                dates.add(schedule.date)
    return dates
