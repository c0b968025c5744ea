"""Phase model endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.phases import PhaseEvaluationRequest, PhaseEvaluationResponse
from ...services.phases import ALL_PHASES, is_phase_required, next_phase, previous_phase, required_phases

router = APIRouter(prefix="/phases", tags=["phases"])


@router.post("/evaluate", response_model=PhaseEvaluationResponse, status_code=status.HTTP_200_OK)
def evaluate(payload: PhaseEvaluationRequest) -> PhaseEvaluationResponse:
    config = payload.config.to_config()
    current = payload.current_phase
    return PhaseEvaluationResponse(
        order_source=payload.config.order_source,
        current_phase=current,
        required_phases=required_phases(config),
        next_phase=next_phase(config, current),
        previous_phase=previous_phase(config, current),
        is_required={phase: is_phase_required(config, phase) for phase in ALL_PHASES},
    )
