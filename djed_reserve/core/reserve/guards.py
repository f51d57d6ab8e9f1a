"""Guard functions for the reserve engine.

One pure function per action. Each runs against the PRE-state (already
sampled for the economic actions) and either raises ``ValidationError`` /
``InvariantViolation`` or returns the ``Quote`` the action will settle at
(``None`` for actions that move no value).
"""

from __future__ import annotations

from . import oracle, pricing
from .errors import ValidationError
from .ownership import require_owner
from .phase import require_phase
from .types import ActionParams, Observation, Phase, Quote, ReserveState


def guard_mint_orc(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> Quote:
    require_phase(state, Phase.SEEDING, Phase.LIVE)
    return pricing.quote_mint_orc(state, obs, params.amount, twap_e8)


def guard_burn_orc(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> Quote:
    require_phase(state, Phase.LIVE)
    return pricing.quote_burn_orc(state, obs, params.amount, twap_e8)


def guard_mint_od(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> Quote:
    require_phase(state, Phase.LIVE)
    return pricing.quote_mint_od(state, obs, params.amount, twap_e8)


def guard_burn_od(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> Quote:
    require_phase(state, Phase.LIVE)
    return pricing.quote_burn_od(state, obs, params.amount, twap_e8)


def guard_premint_od(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> Quote:
    require_owner(state, obs.caller)
    require_phase(state, Phase.PREMINT)
    if state.premint_done:
        raise ValidationError("premint already done")
    return pricing.quote_premint_od(state, obs, params.amount)


def guard_advance_phase(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> None:
    require_owner(state, obs.caller)
    require_phase(state, Phase.SEEDING)
    return None


def guard_init_pool(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> None:
    require_owner(state, obs.caller)
    if not params.pool_ref:
        raise ValidationError("pool_ref must be non-empty")
    if obs.cumulative_price is None:
        raise ValidationError("price source reading unavailable")
    return None


def guard_update_twap_snapshot(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> None:
    if not oracle.is_bound(state):
        raise ValidationError("oracle is not bound")
    return None


def guard_transfer_ownership(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> None:
    require_owner(state, obs.caller)
    if not params.new_owner:
        raise ValidationError("new owner must be non-empty")
    return None


def guard_sample(state: ReserveState, params: ActionParams, obs: Observation, twap_e8: int) -> Quote:
    return Quote(gross=0, fee=0, net=0, twap_e8=twap_e8)
