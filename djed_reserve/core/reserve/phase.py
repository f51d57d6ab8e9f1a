"""Bootstrap phase transitions: SEEDING -> PREMINT -> LIVE.

SEEDING -> PREMINT is an explicit owner action that fixes the seed price.
PREMINT -> LIVE has no entry point of its own; the oracle applies it when a
sample commits a full window (see ``oracle.sample``). LIVE is terminal.
"""

from __future__ import annotations

from dataclasses import replace

from .errors import ValidationError
from .types import Phase, ReserveState


def advance_phase(state: ReserveState, seed_price_e8: int) -> ReserveState:
    if state.phase is not Phase.SEEDING:
        raise ValidationError(f"advance_phase requires SEEDING, phase is {state.phase.name}")
    if seed_price_e8 <= 0:
        raise ValidationError("seed price must be positive")
    return replace(state, phase=Phase.PREMINT, seed_price_e8=seed_price_e8)


def promote_to_live(state: ReserveState) -> ReserveState:
    """PREMINT -> LIVE; any other phase is returned unchanged."""
    if state.phase is Phase.PREMINT:
        return replace(state, phase=Phase.LIVE)
    return state


def require_phase(state: ReserveState, *allowed: Phase) -> None:
    if state.phase not in allowed:
        names = "/".join(p.name for p in allowed)
        raise ValidationError(f"requires {names}, phase is {state.phase.name}")
