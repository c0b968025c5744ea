import json
from pathlib import Path

import pytest

from eventops.data import orders_repository
from eventops.data.orders_repository import (
    get_order,
    load_orders,
    order_from_record,
    update_order_status,
)
from eventops.models.domain import AdHocConfig, SalesConfig


@pytest.fixture(autouse=True)
def no_database(monkeypatch):
    monkeypatch.setattr(orders_repository, "get_supabase_client", lambda: None)


def _write_orders(path: Path) -> Path:
    payload = {
        "sales": [
            {
                "orderNumber": "SO-0001",
                "orderSource": "sales",
                "status": "packing",
                "customerData": {"customerName": "Acme", "deliveryAddress": "1 Jalan Site"},
                "eventData": {"customerPreferredSetupDate": "2025-03-01"},
                "additionalInfo": {"setupLorry": "Team A", "scheduleStartTime": "10:00"},
            }
        ],
        "adHoc": [
            {
                "orderNumber": "AH-0001",
                "status": "scheduling",
                "adHocOptions": {"requiresPacking": False},
            }
        ],
    }
    target = path / "orders.json"
    target.write_text(json.dumps(payload), encoding="utf-8")
    return target


def test_sales_record_defaults():
    order = order_from_record({"orderNumber": "SO-1", "orderSource": "sales"})

    assert order.config == SalesConfig(dismantle_required=True)
    assert order.status == "scheduling"
    assert order.customer_name == "Unknown"


def test_sales_record_without_dismantle():
    order = order_from_record({"orderNumber": "SO-1", "eventData": {"dismantleRequired": False}})

    assert order.config == SalesConfig(dismantle_required=False)


def test_ad_hoc_prefix_and_legacy_pickup_flag():
    order = order_from_record(
        {"orderNumber": "ah-0007", "adHocOptions": {"requiresSetup": False, "requiresPickup": True}}
    )

    assert order.config == AdHocConfig(
        requires_packing=True,
        requires_setup=False,
        requires_dismantle=True,
        requires_other_adhoc=True,
    )


def test_current_other_adhoc_flag_wins_over_legacy():
    order = order_from_record(
        {
            "orderNumber": "AH-1",
            "orderSource": "ad-hoc",
            "adHocOptions": {"requiresOtherAdhoc": False, "requiresPickup": True},
        }
    )

    assert order.config.requires_other_adhoc is False


def test_schedule_dates_prefer_confirmed_over_preferred():
    order = order_from_record(
        {
            "orderNumber": "SO-1",
            "customerData": {"companyName": "Beta Sdn Bhd", "deliveryCity": "Ipoh", "deliveryAddress1": "Jalan 1"},
            "eventData": {
                "customerPreferredSetupDate": "2025-03-01",
                "customerPreferredDismantleDate": "2025-03-04",
            },
            "additionalInfo": {
                "confirmedSetupDate": "2025-03-02",
                "setupLorry": "Team A",
                "travelDurationHours": "1",
                "travelDurationMinutes": 30,
                "dismantleLorry": "Team B",
            },
        }
    )

    assert order.customer_name == "Beta Sdn Bhd"
    assert order.delivery_address == "Jalan 1, Ipoh"
    assert order.setup.date == "2025-03-02"
    assert order.setup.travel_hours == 1
    assert order.setup.travel_minutes == 30
    assert order.dismantle.date == "2025-03-04"
    assert order.dismantle.team == "Team B"


def test_load_orders_from_file(tmp_path: Path):
    source = _write_orders(tmp_path)

    orders = load_orders(source)

    assert [order.order_number for order in orders] == ["SO-0001", "AH-0001"]
    assert orders[1].order_source == "ad-hoc"
    assert orders[1].config.requires_packing is False
    assert get_order("SO-0001", source).setup.team == "Team A"
    assert get_order("SO-9999", source) is None


def test_missing_order_file_means_no_orders(tmp_path: Path):
    assert load_orders(tmp_path / "missing.json") == ()


def test_update_order_status_writes_back(tmp_path: Path):
    source = _write_orders(tmp_path)

    assert update_order_status("AH-0001", "invoice", source) is True
    assert update_order_status("SO-9999", "invoice", source) is False

    payload = json.loads(source.read_text(encoding="utf-8"))
    assert payload["adHoc"][0]["status"] == "invoice"
    assert payload["sales"][0]["status"] == "packing"
