"""`reserve`: pure-Python functional core of the Djed-style reserve engine.

- deterministic, integer-only transitions (floor division everywhere),
- immutable state (frozen dataclasses),
- fail-closed guards and invariant checks.

Collaborator readings (custody balance, supplies, cumulative price, block
height, caller) enter as an ``Observation``; value movements leave as the
ordered ``Effect.transfers`` list, which the integration layer applies.

Public API:
- `initial_state(owner) -> ReserveState`
- `step(state, params, obs) -> StepResult`
- `step_or_raise(state, params, obs) -> StepResult` (raises on rejection)
"""

from .engine import step, step_or_raise
from .errors import CollaboratorFailure, InvariantViolation, ReserveError, ValidationError
from .state import initial_state, state_from_dict, state_to_dict
from .types import (
    Action,
    ActionParams,
    Effect,
    Event,
    Observation,
    Phase,
    Quote,
    ReserveState,
    StepResult,
    Transfer,
    TransferKind,
)

__all__ = [
    "step",
    "step_or_raise",
    "initial_state",
    "state_from_dict",
    "state_to_dict",
    "Action",
    "ActionParams",
    "Effect",
    "Event",
    "Observation",
    "Phase",
    "Quote",
    "ReserveState",
    "StepResult",
    "Transfer",
    "TransferKind",
    "ReserveError",
    "ValidationError",
    "InvariantViolation",
    "CollaboratorFailure",
]
