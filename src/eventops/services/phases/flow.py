"""Order fulfillment phase sequencing.

Both order sources share one rule: the reachable phases for an order are its
canonical sequence filtered by :func:`is_phase_required`, and ``next``/``previous``
step one position along that list. This keeps the two traversals exact
inverses of each other for any configuration.

Transitions are best effort: a phase that is not reachable for the order (or
an unrecognised status string) is returned unchanged.
"""

from __future__ import annotations

from typing import Literal

from ...models.domain import AdHocConfig, Order, OrderConfig

Phase = Literal[
    "scheduling",
    "planning",
    "procurement",
    "packing",
    "setting-up",
    "dismantling",
    "other-adhoc",
    "invoice",
    "completed",
]

SALES_SEQUENCE: tuple[str, ...] = (
    "scheduling",
    "planning",
    "procurement",
    "packing",
    "setting-up",
    "dismantling",
    "invoice",
    "completed",
)

# Packing always implies procurement, so procurement follows packing here.
AD_HOC_SEQUENCE: tuple[str, ...] = (
    "scheduling",
    "packing",
    "procurement",
    "setting-up",
    "dismantling",
    "other-adhoc",
    "invoice",
    "completed",
)

ALL_PHASES: tuple[str, ...] = (
    "scheduling",
    "planning",
    "procurement",
    "packing",
    "setting-up",
    "dismantling",
    "other-adhoc",
    "invoice",
    "completed",
)


def _config(order: Order | OrderConfig) -> OrderConfig:
    return order.config if isinstance(order, Order) else order


def is_ad_hoc(order: Order | OrderConfig) -> bool:
    return isinstance(_config(order), AdHocConfig)


def is_phase_required(order: Order | OrderConfig, phase: str) -> bool:
    config = _config(order)
    if isinstance(config, AdHocConfig):
        match phase:
            case "packing" | "procurement":
                return config.requires_packing
            case "setting-up":
                return config.requires_setup
            case "dismantling":
                return config.requires_dismantle
            case "other-adhoc":
                return config.requires_other_adhoc
            case "scheduling" | "invoice" | "completed":
                return True
            case _:
                return False

    match phase:
        case "dismantling":
            return config.dismantle_required
        case "other-adhoc":
            return False
        case _:
            return phase in SALES_SEQUENCE


def required_phases(order: Order | OrderConfig) -> list[str]:
    sequence = AD_HOC_SEQUENCE if is_ad_hoc(order) else SALES_SEQUENCE
    return [phase for phase in sequence if is_phase_required(order, phase)]


def next_phase(order: Order | OrderConfig, current: str) -> str:
    phases = required_phases(order)
    if current not in phases:
        return current
    index = phases.index(current)
    return phases[index + 1] if index + 1 < len(phases) else current


def previous_phase(order: Order | OrderConfig, current: str) -> str:
    phases = required_phases(order)
    if current not in phases:
        return current
    index = phases.index(current)
    return phases[index - 1] if index > 0 else current
