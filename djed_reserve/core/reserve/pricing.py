"""Mint/burn pricing for the stablecoin (OD) and the reserve token (ORC).

One pure quote function per priced action. Each takes the (already sampled)
state, the collaborator observation, the input amount and the TWAP in force,
and returns a ``Quote`` or raises ``ValidationError`` / ``InvariantViolation``.

Fees are always taken from the output leg, so the withheld part of any
collateral stays in custody and accrues to equity.
"""

from __future__ import annotations

from .errors import InvariantViolation, ValidationError
from .math import (
    MAX_AMOUNT,
    MAX_RATIO_E8,
    MIN_RATIO_E8,
    RATIO_SCALE,
    apply_fee,
    collateral_to_stable,
    equity_in_collateral,
    reserve_ratio,
    require_at_least,
    require_at_most,
    stable_to_collateral,
)
from .types import Observation, Phase, Quote, ReserveState


def _require_twap(twap_e8: int) -> None:
    if twap_e8 <= 0:
        raise InvariantViolation("twap_unavailable")


def _net_after_fee(gross: int, fee_rate_e8: int) -> tuple[int, int]:
    fee, net = apply_fee(gross, fee_rate_e8)
    if net == 0:
        raise ValidationError("net output is zero")
    if net > MAX_AMOUNT:
        raise InvariantViolation("amount_overflow")
    return fee, net


def quote_mint_orc(state: ReserveState, obs: Observation, collateral_in: int, twap_e8: int) -> Quote:
    """Reserve tokens for ``collateral_in``, priced after the deposit lands.

    The very first mint uses the seed price when one is set, else 1:1. Later
    mints are priced against equity: the raw custody balance while SEEDING,
    collateral in excess of liabilities once LIVE.
    """
    ratio_after = 0
    if state.phase is Phase.LIVE:
        _require_twap(twap_e8)
        ratio_after = require_at_most(
            MAX_RATIO_E8, obs.collateral_balance, collateral_in, twap_e8, obs.stable_supply,
        )

    balance_after = obs.collateral_balance + collateral_in
    if obs.reserve_supply == 0:
        if state.seed_price_e8 > 0:
            gross = (collateral_in * state.seed_price_e8) // RATIO_SCALE
        else:
            gross = collateral_in
    else:
        if state.phase is Phase.SEEDING:
            equity = balance_after
        else:
            equity = equity_in_collateral(balance_after, twap_e8, obs.stable_supply)
        if equity == 0:
            raise InvariantViolation("zero_equity")
        gross = (collateral_in * obs.reserve_supply) // equity

    fee, net = _net_after_fee(gross, state.fee_rate_e8)
    return Quote(gross=gross, fee=fee, net=net, twap_e8=twap_e8, ratio_after_e8=ratio_after)


def quote_burn_orc(state: ReserveState, obs: Observation, reserve_in: int, twap_e8: int) -> Quote:
    """Collateral for ``reserve_in`` reserve tokens: a pro-rata share of equity."""
    _require_twap(twap_e8)
    if obs.reserve_supply == 0:
        raise ValidationError("reserve token supply is zero")
    if reserve_in > obs.reserve_supply:
        raise ValidationError("burn exceeds reserve token supply")

    equity = equity_in_collateral(obs.collateral_balance, twap_e8, obs.stable_supply)
    gross = (reserve_in * equity) // obs.reserve_supply
    fee, net = _net_after_fee(gross, state.fee_rate_e8)

    ratio_after = require_at_least(
        MIN_RATIO_E8, obs.collateral_balance, -net, twap_e8, obs.stable_supply, 0,
    )
    return Quote(gross=gross, fee=fee, net=net, twap_e8=twap_e8, ratio_after_e8=ratio_after)


def quote_mint_od(state: ReserveState, obs: Observation, collateral_in: int, twap_e8: int) -> Quote:
    """Stablecoins for ``collateral_in`` at the TWAP; must keep the ratio >= MIN."""
    _require_twap(twap_e8)
    gross = collateral_to_stable(collateral_in, twap_e8)
    fee, net = _net_after_fee(gross, state.fee_rate_e8)

    ratio_after = require_at_least(
        MIN_RATIO_E8, obs.collateral_balance, collateral_in, twap_e8, obs.stable_supply, net,
    )
    return Quote(gross=gross, fee=fee, net=net, twap_e8=twap_e8, ratio_after_e8=ratio_after)


def quote_burn_od(state: ReserveState, obs: Observation, stable_in: int, twap_e8: int) -> Quote:
    """Collateral for ``stable_in`` stablecoins at the TWAP.

    No ratio bound applies: redemption is always honored while custody can pay.
    """
    _require_twap(twap_e8)
    if stable_in > obs.stable_supply:
        raise ValidationError("burn exceeds stablecoin supply")

    gross = stable_to_collateral(stable_in, twap_e8)
    fee, net = _net_after_fee(gross, state.fee_rate_e8)
    if net > obs.collateral_balance:
        raise InvariantViolation("insufficient_collateral")

    ratio_after = reserve_ratio(
        obs.collateral_balance - net, twap_e8, obs.stable_supply - stable_in,
    )
    return Quote(gross=gross, fee=fee, net=net, twap_e8=twap_e8, ratio_after_e8=ratio_after)


def quote_premint_od(state: ReserveState, obs: Observation, amount: int) -> Quote:
    """One-shot owner mint, collateralized at the seed price (no TWAP yet)."""
    ratio = (obs.collateral_balance * state.seed_price_e8) // amount
    if ratio < MIN_RATIO_E8:
        raise InvariantViolation("ratio_below_min")
    return Quote(gross=amount, fee=0, net=amount, ratio_after_e8=ratio)
