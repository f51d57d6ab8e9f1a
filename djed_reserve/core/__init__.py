"""
Core reserve algorithms
"""

from .reserve import (
    Action,
    ActionParams,
    Effect,
    Event,
    Observation,
    Phase,
    ReserveState,
    StepResult,
    initial_state,
    step,
    step_or_raise,
)

__all__ = [
    "Action",
    "ActionParams",
    "Effect",
    "Event",
    "Observation",
    "Phase",
    "ReserveState",
    "StepResult",
    "initial_state",
    "step",
    "step_or_raise",
]
