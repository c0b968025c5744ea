"""Phase model request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field

from ..models.domain import AdHocConfig, OrderConfig, SalesConfig


class OrderConfigModel(BaseModel):
    order_source: Literal["sales", "ad-hoc"] = "sales"
    dismantle_required: bool = Field(default=True, description="Sales orders only.")
    requires_packing: bool = True
    requires_setup: bool = True
    requires_dismantle: bool = True
    requires_other_adhoc: bool = False

    def to_config(self) -> OrderConfig:
        if self.order_source == "sales":
            return SalesConfig(dismantle_required=self.dismantle_required)
        return AdHocConfig(
            requires_packing=self.requires_packing,
            requires_setup=self.requires_setup,
            requires_dismantle=self.requires_dismantle,
            requires_other_adhoc=self.requires_other_adhoc,
        )


class PhaseEvaluationRequest(BaseModel):
    config: OrderConfigModel = Field(default_factory=OrderConfigModel)
    current_phase: str = "scheduling"


class PhaseEvaluationResponse(BaseModel):
    order_source: str
    current_phase: str
    required_phases: List[str]
    next_phase: str
    previous_phase: str
    is_required: Dict[str, bool]


class OrderPhasesResponse(PhaseEvaluationResponse):
    order_number: str
    customer_name: str


class StatusChangeResponse(BaseModel):
    order_number: str
    previous_status: str
    status: str
    changed: bool
