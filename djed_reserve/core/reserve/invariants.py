"""Invariant checkers for the reserve engine.

Each ``inv_*`` function returns True when the invariant holds on a single
state; ``check_all()`` returns the list of violated invariant IDs (empty = all
pass). ``check_transition()`` covers the invariants that relate a pre-state, a
post-state and the block the step ran at.

Ratio bounds are not here: they depend on collaborator balances and are
enforced by the pricing quotes before any transfer is planned.
"""

from __future__ import annotations

from typing import Callable

from .math import MAX_AMOUNT, MAX_FEE_RATE_E8
from .types import Phase, ReserveState


def inv_premint_after_seeding(s: ReserveState) -> bool:
    if not s.premint_done:
        return True
    return s.phase is not Phase.SEEDING


def inv_seed_price_iff_past_seeding(s: ReserveState) -> bool:
    return (s.phase is not Phase.SEEDING) == (s.seed_price_e8 > 0)


def inv_fee_rate_bounded(s: ReserveState) -> bool:
    return 0 <= s.fee_rate_e8 <= MAX_FEE_RATE_E8


def inv_window_positive(s: ReserveState) -> bool:
    return s.twap_window_blocks >= 1


def inv_unbound_oracle_zeroed(s: ReserveState) -> bool:
    if s.pool_ref is not None:
        return True
    return (
        not s.snapshot_seen
        and s.snapshot_cumulative == 0
        and s.snapshot_block == 0
        and s.last_twap_e8 == 0
    )


def inv_snapshot_nonneg(s: ReserveState) -> bool:
    return s.snapshot_cumulative >= 0 and s.snapshot_block >= 0


def inv_twap_in_range(s: ReserveState) -> bool:
    return 0 <= s.last_twap_e8 <= MAX_AMOUNT


def inv_owner_set(s: ReserveState) -> bool:
    return bool(s.owner)


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[ReserveState], bool]] = {
    "inv_premint_after_seeding": inv_premint_after_seeding,
    "inv_seed_price_iff_past_seeding": inv_seed_price_iff_past_seeding,
    "inv_fee_rate_bounded": inv_fee_rate_bounded,
    "inv_window_positive": inv_window_positive,
    "inv_unbound_oracle_zeroed": inv_unbound_oracle_zeroed,
    "inv_snapshot_nonneg": inv_snapshot_nonneg,
    "inv_twap_in_range": inv_twap_in_range,
    "inv_owner_set": inv_owner_set,
}


def check_all(state: ReserveState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]


def check_transition(pre: ReserveState, post: ReserveState, block_height: int) -> list[str]:
    """Invariants over one step: phase never regresses, premint never un-happens,
    and the snapshot is never from the future."""
    violated: list[str] = []
    if post.phase < pre.phase:
        violated.append("inv_phase_monotonic")
    if pre.premint_done and not post.premint_done:
        violated.append("inv_premint_one_shot")
    if post.snapshot_seen and post.snapshot_block > block_height:
        violated.append("inv_snapshot_not_from_future")
    return violated
