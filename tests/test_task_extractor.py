from eventops.models.domain import AdHocConfig, Order, SalesConfig, TaskSchedule
from eventops.services.scheduling import (
    dates_with_tasks,
    extract_tasks_for_date,
    group_tasks_by_team,
    sort_tasks_by_time,
)
from eventops.services.scheduling.extractor import effective_start_minutes, extract_order_tasks

HUB = "Hub, Ipoh"


def _order(number: str = "SO-0001", **schedules) -> Order:
    return Order(
        order_number=number,
        config=SalesConfig(),
        customer_name="Acme",
        delivery_address="1 Jalan Site, Ipoh",
        **schedules,
    )


def _setup(**overrides) -> TaskSchedule:
    values = dict(
        date="2025-03-01",
        team="Team A",
        departure_time="08:00",
        travel_hours=1,
        travel_minutes=15,
        start_time="09:30",
        end_time="11:00",
    )
    values.update(overrides)
    return TaskSchedule(**values)


def test_setup_task_derives_arrival_and_return_departure():
    [task] = extract_order_tasks(_order(setup=_setup()), "2025-03-01", HUB)

    assert task.key == "SO-0001-setup"
    assert task.departure_from_type == "hub"
    assert task.departure_from_address == HUB
    assert task.arrival_time == "09:15"
    assert task.outbound_travel_mins == 75
    assert task.task_start_time == "09:30"
    assert task.return_departure_time == "11:00"
    assert task.site_address == "1 Jalan Site, Ipoh"
    assert task.coordinates is None


def test_task_start_defaults_to_arrival():
    [task] = extract_order_tasks(_order(setup=_setup(start_time="")), "2025-03-01", HUB)

    assert task.task_start_time == task.arrival_time == "09:15"


def test_arrival_wraps_past_midnight():
    schedule = _setup(departure_time="23:30", travel_hours=1, travel_minutes=0)
    [task] = extract_order_tasks(_order(setup=schedule), "2025-03-01", HUB)

    assert task.arrival_time == "00:30"


def test_departure_from_other_location_and_destination_override():
    schedule = _setup(
        departure_from_type="other",
        departure_address="Previous Site",
        destination_address="Hall B, Ipoh",
    )
    [task] = extract_order_tasks(_order(setup=schedule), "2025-03-01", HUB)

    assert task.departure_from_type == "other"
    assert task.departure_from_address == "Previous Site"
    assert task.site_address == "Hall B, Ipoh"


def test_malformed_fields_yield_empty_values():
    schedule = _setup(departure_time="late", travel_hours="x", travel_minutes=None, end_time="")
    [task] = extract_order_tasks(_order(setup=schedule), "2025-03-01", HUB)

    assert task.arrival_time == ""
    assert task.outbound_travel_mins == 0
    assert task.task_start_time == "09:30"
    assert task.return_departure_time == ""


def test_unassigned_or_other_day_tasks_are_skipped():
    order = _order(
        setup=_setup(team=""),
        dismantle=_setup(date="2025-03-02", team="Team B"),
    )

    assert extract_order_tasks(order, "2025-03-01", HUB) == []
    assert [task.task_type for task in extract_order_tasks(order, "2025-03-02", HUB)] == ["dismantle"]


def test_other_adhoc_departs_from_hub_without_travel_data():
    order = Order(
        order_number="AH-0002",
        config=AdHocConfig(requires_other_adhoc=True),
        customer_name="Beta",
        delivery_address="Beta Site",
        other_adhoc=TaskSchedule(date="2025-03-01", team="Team C", start_time="14:00", end_time="15:00"),
    )
    [task] = extract_order_tasks(order, "2025-03-01", HUB)

    assert task.task_type == "other-adhoc"
    assert task.departure_from_address == HUB
    assert task.departure_time == ""
    assert task.arrival_time == ""
    assert task.outbound_travel_mins == 0
    assert task.return_departure_time == "15:00"


def test_grouping_and_sorting():
    orders = [
        _order("SO-1", setup=_setup(departure_time="10:00", start_time="11:00", end_time="12:00")),
        _order("SO-2", setup=_setup(departure_time="", start_time="09:00", end_time="10:00")),
        _order("SO-3", setup=_setup(departure_time="", start_time="", travel_hours=0, travel_minutes=0)),
        _order("SO-4", setup=_setup(team="Team B")),
    ]
    grouped = group_tasks_by_team(extract_tasks_for_date(orders, "2025-03-01", HUB))

    assert sorted(grouped) == ["Team A", "Team B"]
    ordered = sort_tasks_by_time(grouped["Team A"])
    assert [task.order_number for task in ordered] == ["SO-2", "SO-1", "SO-3"]
    assert effective_start_minutes(ordered[-1]) == 24 * 60


def test_dates_with_tasks_requires_a_team():
    orders = [
        _order("SO-1", setup=_setup(date="2025-03-01"), dismantle=_setup(date="2025-03-03", team="")),
        _order("SO-2", dismantle=_setup(date="2025-03-05")),
    ]

    assert dates_with_tasks(orders) == {"2025-03-01", "2025-03-05"}
