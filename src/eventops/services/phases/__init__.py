"""Order fulfillment phase model."""

from .flow import (
    ALL_PHASES,
    Phase,
    is_ad_hoc,
    is_phase_required,
    next_phase,
    previous_phase,
    required_phases,
)

__all__ = [
    "ALL_PHASES",
    "Phase",
    "is_ad_hoc",
    "is_phase_required",
    "next_phase",
    "previous_phase",
    "required_phases",
]
