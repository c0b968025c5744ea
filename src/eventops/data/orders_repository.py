"""Order loader with database-first approach, falling back to a JSON dump.

``order_from_record`` is the migration boundary: stored camelCase records
(including legacy field names) are converted once into typed ``Order``
objects, so the phase model and task extractor never see raw option bags.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import AdHocConfig, Order, SalesConfig, TaskSchedule

logger = logging.getLogger(__name__)

SALES_TABLE = "sales_orders"
AD_HOC_TABLE = "ad_hoc_orders"


def is_ad_hoc_order_number(order_number: str) -> bool:
    return order_number.upper().startswith("AH-")


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _int(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0


def _float(value: Any) -> float:
    try:
        return float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0


def _flag(options: dict, key: str, default: bool) -> bool:
    value = options.get(key)
    return value if isinstance(value, bool) else default


def format_address_parts(
    building: str = "",
    gate: str = "",
    address1: str = "",
    address2: str = "",
    post_code: str = "",
    city: str = "",
    state: str = "",
) -> str:
    first_line = " ".join(part for part in (gate.strip(), address1.strip()) if part)
    post_line = " ".join(part for part in (post_code.strip(), city.strip(), state.strip()) if part)
    return ", ".join(part for part in (building.strip(), first_line, address2.strip(), post_line) if part)


def delivery_address(customer: dict) -> str:
    from_parts = format_address_parts(
        building=_str(customer.get("deliveryBuildingName")),
        gate=_str(customer.get("deliveryAddressGate")),
        address1=_str(customer.get("deliveryAddress1") or customer.get("deliveryAddressJalan")),
        address2=_str(customer.get("deliveryAddress2") or customer.get("deliveryAddressTaman")),
        post_code=_str(customer.get("deliveryPostCode")),
        city=_str(customer.get("deliveryCity")),
        state=_str(customer.get("deliveryState")),
    )
    return from_parts or _str(customer.get("deliveryAddress"))


def _order_config(raw: dict) -> SalesConfig | AdHocConfig:
    source = raw.get("orderSource")
    ad_hoc = source == "ad-hoc" or (source is None and is_ad_hoc_order_number(_str(raw.get("orderNumber"))))
    if not ad_hoc:
        return SalesConfig(dismantle_required=_flag(_dict(raw.get("eventData")), "dismantleRequired", True))

    options = _dict(raw.get("adHocOptions"))
    other_adhoc = options.get("requiresOtherAdhoc")
    if not isinstance(other_adhoc, bool):
        # Orders saved before the rename carry ``requiresPickup``.
        other_adhoc = _flag(options, "requiresPickup", False)
    return AdHocConfig(
        requires_packing=_flag(options, "requiresPacking", True),
        requires_setup=_flag(options, "requiresSetup", True),
        requires_dismantle=_flag(options, "requiresDismantle", True),
        requires_other_adhoc=other_adhoc,
    )


def _setup_schedule(info: dict, event: dict) -> TaskSchedule:
    return TaskSchedule(
        date=_str(info.get("confirmedSetupDate")) or _str(event.get("customerPreferredSetupDate")),
        team=_str(info.get("setupLorry")),
        departure_from_type="other" if info.get("setupDepartureFromType") == "other" else "hub",
        departure_address=_str(info.get("setupDepartureAddress")),
        departure_time=_str(info.get("departureFromHub")),
        travel_hours=_int(info.get("travelDurationHours")),
        travel_minutes=_int(info.get("travelDurationMinutes")),
        destination_address=_str(info.get("setupDestinationAddress")),
        start_time=_str(info.get("scheduleStartTime")),
        end_time=_str(info.get("estimatedEndTime")),
        distance_km=_float(info.get("setupDistanceKm")),
        return_arrival_time=_str(info.get("setupReturnArrivalTime")),
        return_distance_km=_float(info.get("setupReturnDistanceKm")),
        return_travel_mins=_int(info.get("setupReturnTravelMins")),
    )


def _dismantle_schedule(info: dict, event: dict) -> TaskSchedule:
    return TaskSchedule(
        date=_str(info.get("confirmedDismantleDate")) or _str(event.get("customerPreferredDismantleDate")),
        team=_str(info.get("dismantleLorry")),
        departure_from_type="other" if info.get("dismantleDepartureFromType") == "other" else "hub",
        departure_address=_str(info.get("dismantleDepartureAddress")),
        departure_time=_str(info.get("dismantleDepartureTime")),
        travel_hours=_int(info.get("dismantleTravelHours")),
        travel_minutes=_int(info.get("dismantleTravelMinutes")),
        destination_address=_str(info.get("dismantleDestinationAddress")),
        start_time=_str(info.get("dismantleScheduleStartTime")),
        end_time=_str(info.get("dismantleEstimatedEndTime")),
        distance_km=_float(info.get("dismantleDistanceKm")),
        return_arrival_time=_str(info.get("dismantleReturnArrivalTime")),
        return_distance_km=_float(info.get("dismantleReturnDistanceKm")),
        return_travel_mins=_int(info.get("dismantleReturnTravelMins")),
    )


def _other_adhoc_schedule(info: dict) -> TaskSchedule:
    return TaskSchedule(
        date=_str(info.get("confirmedOtherAdhocDate")),
        team=_str(info.get("otherAdhocLorry")),
        start_time=_str(info.get("otherAdhocScheduleStartTime")),
        end_time=_str(info.get("otherAdhocEstimatedEndTime")),
    )


def order_from_record(raw: dict) -> Order:
    """Convert one stored order record into an :class:`Order`."""

    customer = _dict(raw.get("customerData"))
    info = _dict(raw.get("additionalInfo"))
    event = _dict(raw.get("eventData"))
    return Order(
        order_number=_str(raw.get("orderNumber")),
        config=_order_config(raw),
        status=_str(raw.get("status")) or "scheduling",
        customer_name=_str(customer.get("customerName")) or _str(customer.get("companyName")) or "Unknown",
        delivery_address=delivery_address(customer),
        setup=_setup_schedule(info, event) if info or event else None,
        dismantle=_dismantle_schedule(info, event) if info or event else None,
        other_adhoc=_other_adhoc_schedule(info) if info else None,
    )


def _row_record(row: dict) -> dict:
    data = row.get("data")
    return data if isinstance(data, dict) else row


def _load_records_from_database() -> list[dict] | None:
    """Load raw records from Supabase. Returns None if database not available or empty."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    try:
        records: list[dict] = []
        for table in (SALES_TABLE, AD_HOC_TABLE):
            response = supabase.table(table).select("*").execute()
            records.extend(_row_record(row) for row in response.data or [])
        return records or None
    except Exception as e:
        logger.debug(f"Order query failed, falling back to file: {e}")
        return None


def _read_file(source: Path) -> dict:
    if not source.exists():
        logger.warning(f"Order file not found: {source}")
        return {"sales": [], "adHoc": []}
    with source.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, list):
        return {"sales": payload, "adHoc": []}
    if not isinstance(payload, dict):
        raise ValueError(f"Order file '{source}' must hold a list or a {{sales, adHoc}} object.")
    return {
        "sales": [item for item in payload.get("sales") or [] if isinstance(item, dict)],
        "adHoc": [item for item in payload.get("adHoc") or [] if isinstance(item, dict)],
    }


def _write_file(source: Path, payload: dict) -> None:
    source.parent.mkdir(parents=True, exist_ok=True)
    tmp = source.with_suffix(source.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
    os.replace(tmp, source)


def load_orders(source: Path | None = None) -> tuple[Order, ...]:
    """Get orders from the database first, fall back to the JSON file."""

    records = _load_records_from_database() if source is None else None
    if records is None:
        payload = _read_file(source or settings.orders_file)
        records = [*payload["sales"], *payload["adHoc"]]
    orders = []
    for record in records:
        order = order_from_record(record)
        if order.order_number:
            orders.append(order)
    return tuple(orders)


def get_order(order_number: str, source: Path | None = None) -> Optional[Order]:
    for order in load_orders(source):
        if order.order_number == order_number:
            return order
    return None


def _update_status_in_database(order_number: str, status: str) -> bool | None:
    supabase = get_supabase_client()
    if not supabase:
        return None
    table = AD_HOC_TABLE if is_ad_hoc_order_number(order_number) else SALES_TABLE
    try:
        response = (
            supabase.table(table)
            .update({"status": status})
            .eq("order_number", order_number)
            .execute()
        )
        return bool(response.data)
    except Exception as e:
        logger.warning(f"Failed to update status for {order_number} in database: {e}")
        return None


def update_order_status(order_number: str, status: str, source: Path | None = None) -> bool:
    """Persist a new status. Returns False if the order does not exist."""

    if source is None:
        updated = _update_status_in_database(order_number, status)
        if updated is not None:
            return updated

    path = source or settings.orders_file
    payload = _read_file(path)
    key = "adHoc" if is_ad_hoc_order_number(order_number) else "sales"
    found = False
    for bucket in (key, "sales" if key == "adHoc" else "adHoc"):
        for record in payload[bucket]:
            if record.get("orderNumber") == order_number:
                record["status"] = status
                found = True
        if found:
            break
    if found:
        _write_file(path, payload)
    return found
