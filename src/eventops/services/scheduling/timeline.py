"""Timeline events for a team's day, in display order."""

from __future__ import annotations

from ...models.domain import TeamDaySchedule, TimelineEvent
from ..timeutils import MINUTES_PER_DAY, parse_hhmm

_LABELS = {
    "setup": ("Setup begins", "Setup complete"),
    "dismantle": ("Dismantle begins", "Dismantle complete"),
}


def _sort_key(event: TimelineEvent) -> int:
    minutes = parse_hhmm(event.time)
    return minutes if minutes is not None else MINUTES_PER_DAY


def build_timeline_events(schedule: TeamDaySchedule) -> list[TimelineEvent]:
    events: list[TimelineEvent] = []
    team, color = schedule.team, schedule.color

    for task in schedule.tasks:
        start_label, end_label = _LABELS.get(task.task_type, ("Task begins", "Task complete"))
        prefix = task.key

        def add(suffix: str, time: str, kind: str, label: str, **extra) -> None:
            events.append(
                TimelineEvent(id=f"{prefix}-{suffix}", time=time, type=kind, label=label, team=team, color=color, **extra)
            )

        if task.departure_time:
            add(
                "depart-hub",
                task.departure_time,
                "depart-hub",
                "Depart from HUB" if task.departure_from_type == "hub" else "Depart from site",
                order_number=task.order_number,
                customer_name=task.customer_name,
                address=task.departure_from_address or None,
            )

        merged_arrival = bool(task.arrival_time) and task.arrival_time == task.task_start_time
        if task.arrival_time:
            add(
                "arrive-site-start" if merged_arrival else "arrive-site",
                task.arrival_time,
                "arrive-site",
                f"Arrive at site & {start_label}" if merged_arrival else "Arrive at site",
                order_number=task.order_number,
                customer_name=task.customer_name,
                address=task.site_address,
            )
        if task.task_start_time and not merged_arrival:
            add(
                "task-start",
                task.task_start_time,
                "task-start",
                start_label,
                order_number=task.order_number,
                customer_name=task.customer_name,
            )

        if task.task_end_time and task.task_end_time == task.return_departure_time:
            add(
                "task-end-depart-site",
                task.task_end_time,
                "task-end",
                f"{end_label} / Depart from site",
                order_number=task.order_number,
            )
        else:
            if task.task_end_time:
                add("task-end", task.task_end_time, "task-end", end_label, order_number=task.order_number)
            if task.return_departure_time:
                add("depart-site", task.return_departure_time, "depart-site", "Depart from site")

        if task.hub_arrival_time:
            add("arrive-hub", task.hub_arrival_time, "arrive-hub", "Return to HUB")

    return sorted(events, key=_sort_key)
