"""
Windowed TWAP oracle kernel.

This module is intentionally small and pure:
- The functional core decides what a sample returns and whether it commits.
- The imperative shell is responsible for reading the cumulative price and block height.

A TWAP is ``(cumulative_now - cumulative_snapshot) // (block_now - block_snapshot)``.
The snapshot (the "epoch" baseline) only moves once at least ``twap_window_blocks``
blocks have elapsed, so callers see a continuously updating estimate while the
baseline stays put. Sampling is not read-only: a committing sample while in
PREMINT also moves the phase to LIVE.
"""

from __future__ import annotations

from dataclasses import replace

from .errors import InvariantViolation, ValidationError
from .phase import promote_to_live
from .types import ReserveState

SIDE_FIRST = 0
SIDE_SECOND = 1


def is_bound(state: ReserveState) -> bool:
    return state.pool_ref is not None


def price_side(state: ReserveState) -> int:
    """Which cumulative series prices the collateral in stablecoin terms."""
    return SIDE_FIRST if state.collateral_is_first_asset else SIDE_SECOND


def _commit(state: ReserveState, cumulative: int, block: int) -> ReserveState:
    return replace(
        state,
        snapshot_seen=True,
        snapshot_cumulative=cumulative,
        snapshot_block=block,
    )


def bind(
    state: ReserveState,
    pool_ref: str,
    collateral_is_first_asset: bool,
    cumulative: int,
    block: int,
) -> ReserveState:
    """Record the price source and seed the first epoch at the current reading."""
    if not pool_ref:
        raise ValidationError("pool_ref must be non-empty")
    if cumulative < 0 or block < 0:
        raise ValidationError("cumulative and block must be non-negative")
    bound = replace(
        state,
        pool_ref=pool_ref,
        collateral_is_first_asset=collateral_is_first_asset,
    )
    return _commit(bound, cumulative, block)


def sample(state: ReserveState, cumulative: int | None, block: int) -> tuple[ReserveState, int]:
    """Return ``(next_state, twap_e8)``.

    - unbound: 0, nothing changes;
    - no snapshot yet: commit one, 0;
    - same block as the snapshot: the last committed TWAP;
    - otherwise the candidate TWAP since the snapshot, committed (and PREMINT
      promoted to LIVE) only when the window has elapsed.
    """
    if not is_bound(state):
        return state, 0
    if cumulative is None:
        raise ValidationError("bound oracle needs a cumulative reading")

    if not state.snapshot_seen:
        return _commit(state, cumulative, block), 0

    if block == state.snapshot_block:
        return state, state.last_twap_e8
    if block < state.snapshot_block:
        raise InvariantViolation("block_regressed")

    elapsed = block - state.snapshot_block
    delta = cumulative - state.snapshot_cumulative
    if delta < 0:
        raise InvariantViolation("cumulative_regressed")
    candidate = delta // elapsed

    if elapsed >= state.twap_window_blocks:
        committed = replace(_commit(state, cumulative, block), last_twap_e8=candidate)
        return promote_to_live(committed), candidate
    return state, candidate


def force_snapshot(state: ReserveState, cumulative: int | None, block: int) -> ReserveState:
    """Re-baseline the epoch at the current reading. ``last_twap_e8`` is kept."""
    if not is_bound(state) or cumulative is None:
        raise ValidationError("oracle is not bound")
    if cumulative < 0 or block < 0:
        raise ValidationError("cumulative and block must be non-negative")
    return _commit(state, cumulative, block)
