"""Order status endpoints backed by the order repository."""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, HTTPException, status

from ...data.orders_repository import get_order, update_order_status
from ...models.domain import Order
from ...schemas.phases import OrderPhasesResponse, StatusChangeResponse
from ...services.phases import ALL_PHASES, is_phase_required, next_phase, previous_phase, required_phases
from ..deps import to_http_error

router = APIRouter(prefix="/orders", tags=["orders"])


def _require_order(order_number: str) -> Order:
    try:
        order = get_order(order_number)
    except Exception as exc:
        raise to_http_error(exc, f"load order {order_number}") from exc
    if order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Order {order_number} not found",
        )
    return order


def _transition(order_number: str, step: Callable[[Order, str], str]) -> StatusChangeResponse:
    order = _require_order(order_number)
    target = step(order, order.status)
    changed = target != order.status
    if changed:
        try:
            saved = update_order_status(order_number, target)
        except Exception as exc:
            raise to_http_error(exc, f"update order {order_number}") from exc
        if not saved:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Order {order_number} not found",
            )
    return StatusChangeResponse(
        order_number=order_number,
        previous_status=order.status,
        status=target,
        changed=changed,
    )


@router.get("/{order_number}/phases", response_model=OrderPhasesResponse, status_code=status.HTTP_200_OK)
def order_phases(order_number: str) -> OrderPhasesResponse:
    order = _require_order(order_number)
    return OrderPhasesResponse(
        order_number=order.order_number,
        customer_name=order.customer_name,
        order_source=order.order_source,
        current_phase=order.status,
        required_phases=required_phases(order),
        next_phase=next_phase(order, order.status),
        previous_phase=previous_phase(order, order.status),
        is_required={phase: is_phase_required(order, phase) for phase in ALL_PHASES},
    )


@router.post("/{order_number}/advance", response_model=StatusChangeResponse, status_code=status.HTTP_200_OK)
def advance(order_number: str) -> StatusChangeResponse:
    """Move the order to its next required phase. Terminal or unknown statuses are left unchanged."""
    return _transition(order_number, next_phase)


@router.post("/{order_number}/revert", response_model=StatusChangeResponse, status_code=status.HTTP_200_OK)
def revert(order_number: str) -> StatusChangeResponse:
    return _transition(order_number, previous_phase)
