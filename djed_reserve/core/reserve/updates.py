"""State transition functions for the reserve engine.

One pure function per action, evaluated against the guarded PRE-state.
Mint/burn actions leave ``ReserveState`` untouched: their whole effect is the
transfer list, plus whatever the oracle sample already committed.
"""

from __future__ import annotations

from dataclasses import replace

from . import oracle, ownership, phase
from .errors import ValidationError
from .types import ActionParams, Observation, Quote, ReserveState


def apply_unchanged(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote | None) -> ReserveState:
    return state


def apply_premint_od(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote | None) -> ReserveState:
    return replace(state, premint_done=True)


def apply_advance_phase(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote | None) -> ReserveState:
    return phase.advance_phase(state, params.seed_price_e8)


def apply_init_pool(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote | None) -> ReserveState:
    if obs.cumulative_price is None:
        raise ValidationError("price source reading unavailable")
    return oracle.bind(
        state,
        params.pool_ref,
        params.pool_first_asset_is_collateral,
        obs.cumulative_price,
        obs.block_height,
    )


def apply_update_twap_snapshot(
    state: ReserveState, params: ActionParams, obs: Observation, quote: Quote | None,
) -> ReserveState:
    return oracle.force_snapshot(state, obs.cumulative_price, obs.block_height)


def apply_transfer_ownership(
    state: ReserveState, params: ActionParams, obs: Observation, quote: Quote | None,
) -> ReserveState:
    return ownership.transfer_ownership(state, obs.caller, params.new_owner)
