"""Tests for djed_reserve/core/reserve/engine.py: dispatch table + step function.

Tests cover known action sequences end-to-end through the pure engine.
"""

from dataclasses import replace

import pytest

from djed_reserve.core.reserve import (
    Action,
    ActionParams,
    Event,
    InvariantViolation,
    Observation,
    Phase,
    Transfer,
    TransferKind,
    ValidationError,
    initial_state,
    step,
    step_or_raise,
)
from djed_reserve.core.reserve.math import MAX_AMOUNT
from djed_reserve.core.reserve.updates import apply_init_pool

OWNER = "alice"
TWAP = 10_000_000_000_000


def _premint_bound(block: int = 100):
    return replace(
        initial_state(OWNER),
        phase=Phase.PREMINT,
        seed_price_e8=TWAP,
        pool_ref="pool",
        collateral_is_first_asset=True,
        snapshot_seen=True,
        snapshot_cumulative=0,
        snapshot_block=block,
    )


def _live(block: int = 100):
    return replace(_premint_bound(block), phase=Phase.LIVE, premint_done=True, last_twap_e8=TWAP)


def _obs(caller="bob", block=100, cumulative=0, balance=0, stable=0, reserve=0):
    return Observation(
        caller=caller,
        block_height=block,
        cumulative_price=cumulative,
        collateral_balance=balance,
        stable_supply=stable,
        reserve_supply=reserve,
    )


# ---------------------------------------------------------------------------
# Parameter domains
# ---------------------------------------------------------------------------

class TestParamDomain:
    @pytest.mark.parametrize("action", [Action.MINT_ORC, Action.BURN_ORC, Action.MINT_OD, Action.BURN_OD])
    def test_zero_amount_rejected(self, action):
        r = step(_live(), ActionParams(action=action, amount=0), _obs())
        assert not r.accepted
        assert r.rejection == "validation:param_domain:amount"

    def test_amount_above_max_rejected(self):
        r = step(_live(), ActionParams(action=Action.MINT_OD, amount=MAX_AMOUNT + 1), _obs())
        assert r.rejection == "validation:param_domain:amount"

    @pytest.mark.parametrize("amount", [1.5, True, "1"])
    def test_non_int_amount_rejected(self, amount):
        r = step(initial_state(OWNER), ActionParams(action=Action.MINT_ORC, amount=amount), Observation(caller="bob"))
        assert not r.accepted
        assert r.rejection == "validation:param_domain:amount"

    def test_non_int_seed_price_rejected(self):
        params = ActionParams(action=Action.ADVANCE_PHASE, seed_price_e8=float(TWAP))
        r = step(initial_state(OWNER), params, _obs(caller=OWNER))
        assert r.rejection == "validation:param_domain:seed_price_e8"

    def test_zero_seed_price_rejected(self):
        r = step(initial_state(OWNER), ActionParams(action=Action.ADVANCE_PHASE), _obs(caller=OWNER))
        assert r.rejection == "validation:param_domain:seed_price_e8"

    def test_step_or_raise_maps_to_validation_error(self):
        with pytest.raises(ValidationError):
            step_or_raise(_live(), ActionParams(action=Action.BURN_OD, amount=0), _obs())


# ---------------------------------------------------------------------------
# mint_orc
# ---------------------------------------------------------------------------

class TestMintOrc:
    def test_seeding_first_mint(self):
        s = initial_state(OWNER)
        obs = Observation(caller="bob")
        r = step(s, ActionParams(action=Action.MINT_ORC, amount=1_000_000_000), obs)
        assert r.accepted
        assert r.state == s
        assert r.effect.event == Event.ORC_MINTED
        assert r.effect.net == 985_000_000
        assert r.effect.transfers == (
            Transfer(TransferKind.PULL_COLLATERAL, "bob", 1_000_000_000),
            Transfer(TransferKind.MINT_RESERVE, "bob", 985_000_000),
        )

    def test_premint_phase_rejected(self):
        r = step(_premint_bound(), ActionParams(action=Action.MINT_ORC, amount=1), _obs())
        assert not r.accepted
        assert r.rejection.startswith("validation:")

    def test_live_zero_stable_supply_rejected(self):
        obs = _obs(balance=1_000_000_000, reserve=985_000_000)
        r = step(_live(), ActionParams(action=Action.MINT_ORC, amount=100_000_000), obs)
        assert r.rejection == "invariant:ratio_above_max"


# ---------------------------------------------------------------------------
# Phase + premint
# ---------------------------------------------------------------------------

class TestAdvancePhase:
    def test_owner_advances_once(self):
        params = ActionParams(action=Action.ADVANCE_PHASE, seed_price_e8=TWAP)
        r = step(initial_state(OWNER), params, _obs(caller=OWNER))
        assert r.accepted
        assert r.state.phase is Phase.PREMINT
        assert r.effect.event == Event.PHASE_ADVANCED

        again = step(r.state, params, _obs(caller=OWNER))
        assert not again.accepted
        assert again.rejection.startswith("validation:")

    def test_non_owner_rejected(self):
        params = ActionParams(action=Action.ADVANCE_PHASE, seed_price_e8=TWAP)
        r = step(initial_state(OWNER), params, _obs(caller="bob"))
        assert r.rejection == "validation:caller is not owner"


class TestPremintOd:
    def test_accepted_once(self):
        s = replace(initial_state(OWNER), phase=Phase.PREMINT, seed_price_e8=TWAP)
        params = ActionParams(action=Action.PREMINT_OD, amount=2_500_000_000_000)
        r = step(s, params, Observation(caller=OWNER, collateral_balance=100_000_000))
        assert r.accepted
        assert r.state.premint_done is True
        assert r.effect.transfers == (Transfer(TransferKind.MINT_STABLE, OWNER, 2_500_000_000_000),)

        again = step(r.state, params, Observation(caller=OWNER, collateral_balance=100_000_000))
        assert again.rejection == "validation:premint already done"

    def test_over_limit_rejected(self):
        s = replace(initial_state(OWNER), phase=Phase.PREMINT, seed_price_e8=TWAP)
        params = ActionParams(action=Action.PREMINT_OD, amount=2_500_000_000_001)
        r = step(s, params, Observation(caller=OWNER, collateral_balance=100_000_000))
        assert r.rejection == "invariant:ratio_below_min"

    def test_non_owner_rejected(self):
        s = replace(initial_state(OWNER), phase=Phase.PREMINT, seed_price_e8=TWAP)
        r = step(s, ActionParams(action=Action.PREMINT_OD, amount=1), Observation(caller="bob", collateral_balance=1))
        assert not r.accepted

    def test_seeding_rejected(self):
        r = step(initial_state(OWNER), ActionParams(action=Action.PREMINT_OD, amount=1), Observation(caller=OWNER))
        assert not r.accepted

    def test_does_not_sample(self):
        obs = _obs(caller=OWNER, block=106, cumulative=60_000_000_000_000, balance=100_000_000)
        r = step(_premint_bound(), ActionParams(action=Action.PREMINT_OD, amount=1_000), obs)
        assert r.accepted
        assert r.state.phase is Phase.PREMINT
        assert r.state.snapshot_block == 100


# ---------------------------------------------------------------------------
# Oracle-driven actions
# ---------------------------------------------------------------------------

class TestSampleAndEconomicOps:
    def test_sample_goes_live(self):
        r = step(_premint_bound(), ActionParams(action=Action.SAMPLE), _obs(block=106, cumulative=60_000_000_000_000))
        assert r.accepted
        assert r.effect.event == Event.TWAP_SAMPLED
        assert r.effect.twap_e8 == TWAP
        assert r.state.phase is Phase.LIVE

    def test_economic_op_samples_first(self):
        obs = _obs(block=106, cumulative=60_000_000_000_000, balance=2_000_000_000, stable=20_000_000_000_000)
        r = step(_premint_bound(), ActionParams(action=Action.MINT_OD, amount=100_000_000), obs)
        assert r.accepted
        assert r.state.phase is Phase.LIVE
        assert r.effect.net == 9_850_000_000_000

    def test_rejected_step_discards_sample(self):
        obs = _obs(block=106, cumulative=60_000_000_000_000)
        r = step(_premint_bound(), ActionParams(action=Action.MINT_OD, amount=100_000_000), obs)
        assert not r.accepted
        assert r.state is None

    def test_burn_od_transfer_order(self):
        obs = _obs(balance=1_000_000_000, stable=TWAP)
        r = step(_live(), ActionParams(action=Action.BURN_OD, amount=100_000_000_000), obs)
        assert r.accepted
        assert [t.kind for t in r.effect.transfers] == [TransferKind.BURN_STABLE, TransferKind.PUSH_COLLATERAL]
        assert r.effect.transfers[1].amount == 985_000

    def test_block_regression_rejected(self):
        r = step(_live(block=100), ActionParams(action=Action.SAMPLE), _obs(block=99, cumulative=1))
        assert r.rejection == "invariant:block_regressed"

    def test_step_or_raise_maps_to_invariant_violation(self):
        with pytest.raises(InvariantViolation) as exc:
            step_or_raise(_live(block=100), ActionParams(action=Action.SAMPLE), _obs(block=99, cumulative=1))
        assert exc.value.violations == ["block_regressed"]


class TestInitPool:
    def test_owner_binds(self):
        params = ActionParams(action=Action.INIT_POOL, pool_ref="main", pool_first_asset_is_collateral=True)
        r = step(initial_state(OWNER), params, _obs(caller=OWNER, block=7, cumulative=5))
        assert r.accepted
        assert r.state.pool_ref == "main"
        assert (r.state.snapshot_cumulative, r.state.snapshot_block) == (5, 7)
        assert r.effect.event == Event.POOL_BOUND

    def test_non_owner_rejected(self):
        params = ActionParams(action=Action.INIT_POOL, pool_ref="main")
        r = step(initial_state(OWNER), params, _obs(caller="bob", cumulative=0))
        assert not r.accepted

    def test_missing_reading_rejected(self):
        params = ActionParams(action=Action.INIT_POOL, pool_ref="main")
        r = step(initial_state(OWNER), params, Observation(caller=OWNER))
        assert r.rejection == "validation:price source reading unavailable"


class TestUpdateTwapSnapshot:
    def test_unbound_rejected(self):
        r = step(initial_state(OWNER), ActionParams(action=Action.UPDATE_TWAP_SNAPSHOT), Observation(caller="bob"))
        assert r.rejection == "validation:oracle is not bound"

    def test_anyone_can_force(self):
        r = step(_live(), ActionParams(action=Action.UPDATE_TWAP_SNAPSHOT), _obs(caller="bob", block=103, cumulative=9))
        assert r.accepted
        assert (r.state.snapshot_cumulative, r.state.snapshot_block) == (9, 103)
        assert r.state.last_twap_e8 == TWAP


class TestTransferOwnership:
    def test_transfer_then_old_owner_locked_out(self):
        r = step(
            initial_state(OWNER),
            ActionParams(action=Action.TRANSFER_OWNERSHIP, new_owner="bob"),
            Observation(caller=OWNER),
        )
        assert r.accepted
        assert r.effect.event == Event.OWNERSHIP_TRANSFERRED
        r2 = step(r.state, ActionParams(action=Action.ADVANCE_PHASE, seed_price_e8=1), Observation(caller=OWNER))
        assert r2.rejection == "validation:caller is not owner"

    def test_empty_new_owner_rejected(self):
        r = step(
            initial_state(OWNER),
            ActionParams(action=Action.TRANSFER_OWNERSHIP, new_owner=""),
            Observation(caller=OWNER),
        )
        assert not r.accepted


class TestPostStateInvariants:
    def test_broken_state_rejected(self):
        s = replace(initial_state(OWNER), fee_rate_e8=10**9)
        r = step(s, ActionParams(action=Action.SAMPLE), Observation(caller="bob"))
        assert r.rejection == "invariant:inv_fee_rate_bounded"


class TestUpdates:
    def test_init_pool_without_reading_raises(self):
        params = ActionParams(action=Action.INIT_POOL, pool_ref="main", pool_first_asset_is_collateral=True)
        with pytest.raises(ValidationError, match="reading unavailable"):
            apply_init_pool(initial_state(OWNER), params, Observation(caller=OWNER), None)
