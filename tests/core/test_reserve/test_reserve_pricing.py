"""Tests for djed_reserve/core/reserve/pricing.py: quotes for every priced action."""

from dataclasses import replace

import pytest

from djed_reserve.core.reserve.errors import InvariantViolation, ValidationError
from djed_reserve.core.reserve.math import MIN_RATIO_E8
from djed_reserve.core.reserve.pricing import (
    quote_burn_od,
    quote_burn_orc,
    quote_mint_od,
    quote_mint_orc,
    quote_premint_od,
)
from djed_reserve.core.reserve.state import initial_state
from djed_reserve.core.reserve.types import Observation, Phase

TWAP = 10_000_000_000_000


def _seeding():
    return initial_state("alice")


def _live(**kwargs):
    return replace(
        initial_state("alice"),
        phase=Phase.LIVE,
        seed_price_e8=TWAP,
        premint_done=True,
        **kwargs,
    )


def _obs(balance=0, stable=0, reserve=0):
    return Observation(caller="bob", collateral_balance=balance, stable_supply=stable, reserve_supply=reserve)


# ---------------------------------------------------------------------------
# mint_orc
# ---------------------------------------------------------------------------

class TestMintOrc:
    def test_first_seeding_mint_is_one_to_one_less_fee(self):
        q = quote_mint_orc(_seeding(), _obs(), 1_000_000_000, 0)
        assert (q.gross, q.fee, q.net) == (1_000_000_000, 15_000_000, 985_000_000)

    def test_second_seeding_mint_prices_on_post_inflow_balance(self):
        q = quote_mint_orc(_seeding(), _obs(balance=100_000_000, reserve=98_500_000), 50_000_000, 0)
        assert q.gross == 32_833_333
        assert q.net == 32_340_834

    def test_first_mint_uses_seed_price(self):
        q = quote_mint_orc(
            _live(), _obs(balance=1_000_000_000, stable=20_000_000_000_000), 100_000_000, TWAP,
        )
        assert q.gross == TWAP
        assert q.ratio_after_e8 == 550_000_000

    def test_live_zero_stable_supply_rejected(self):
        with pytest.raises(InvariantViolation) as exc:
            quote_mint_orc(_live(), _obs(balance=1_000_000_000, reserve=1), 100_000_000, TWAP)
        assert exc.value.violations == ["ratio_above_max"]

    def test_live_without_twap_rejected(self):
        with pytest.raises(InvariantViolation) as exc:
            quote_mint_orc(_live(), _obs(balance=1, stable=1, reserve=1), 1, 0)
        assert exc.value.violations == ["twap_unavailable"]

    def test_live_zero_equity_rejected(self):
        obs = _obs(balance=100_000_000, stable=20_000_000_000_000, reserve=1_000_000_000)
        with pytest.raises(InvariantViolation) as exc:
            quote_mint_orc(_live(), obs, 1, TWAP)
        assert exc.value.violations == ["zero_equity"]

    def test_dust_net_rejected(self):
        # 1 unit into a pool of 1 reserve token backed by 1e9: gross floors to 0
        with pytest.raises(ValidationError):
            quote_mint_orc(_seeding(), _obs(balance=1_000_000_000, reserve=1), 1, 0)


# ---------------------------------------------------------------------------
# burn_orc
# ---------------------------------------------------------------------------

class TestBurnOrc:
    def test_pro_rata_share_of_equity(self):
        obs = _obs(balance=1_000_000_000, stable=TWAP, reserve=900_000_000)
        q = quote_burn_orc(_live(), obs, 100_000_000, TWAP)
        assert (q.gross, q.fee, q.net) == (100_000_000, 1_500_000, 98_500_000)
        assert q.ratio_after_e8 == 901_500_000

    def test_projected_ratio_below_min_rejected(self):
        obs = _obs(balance=1_000_000_000, stable=24_000_000_000_000, reserve=760_000_000)
        with pytest.raises(InvariantViolation) as exc:
            quote_burn_orc(_live(), obs, 100_000_000, TWAP)
        assert exc.value.violations == ["ratio_below_min"]

    def test_exceeds_supply_rejected(self):
        with pytest.raises(ValidationError):
            quote_burn_orc(_live(), _obs(balance=1, stable=1, reserve=5), 6, TWAP)

    def test_zero_supply_rejected(self):
        with pytest.raises(ValidationError):
            quote_burn_orc(_live(), _obs(balance=1, stable=1, reserve=0), 1, TWAP)


# ---------------------------------------------------------------------------
# mint_od
# ---------------------------------------------------------------------------

class TestMintOd:
    def test_prices_at_twap(self):
        q = quote_mint_od(_live(), _obs(balance=1_000_000_000), 100_000_000, TWAP)
        assert (q.gross, q.fee, q.net) == (TWAP, 150_000_000_000, 9_850_000_000_000)
        assert q.ratio_after_e8 >= MIN_RATIO_E8

    def test_below_min_rejected(self):
        with pytest.raises(InvariantViolation) as exc:
            quote_mint_od(_live(), _obs(), 100_000_000, TWAP)
        assert exc.value.violations == ["ratio_below_min"]

    def test_zero_net_rejected(self):
        with pytest.raises(ValidationError, match="zero"):
            quote_mint_od(_live(), _obs(balance=10**12), 1, 1)


# ---------------------------------------------------------------------------
# burn_od
# ---------------------------------------------------------------------------

class TestBurnOd:
    def test_prices_at_twap(self):
        q = quote_burn_od(_live(), _obs(balance=1_000_000_000, stable=TWAP), 100_000_000_000, TWAP)
        assert (q.gross, q.fee, q.net) == (1_000_000, 15_000, 985_000)

    def test_honored_far_below_min(self):
        # 200% collateralized
        obs = _obs(balance=100_000_000, stable=5_000_000_000_000)
        q = quote_burn_od(_live(), obs, 100_000_000_000, TWAP)
        assert q.net == 985_000

    def test_insufficient_custody_rejected(self):
        with pytest.raises(InvariantViolation) as exc:
            quote_burn_od(_live(), _obs(balance=1, stable=TWAP), 100_000_000_000, TWAP)
        assert exc.value.violations == ["insufficient_collateral"]

    def test_exceeds_supply_rejected(self):
        with pytest.raises(ValidationError):
            quote_burn_od(_live(), _obs(balance=10**9, stable=10), 11, TWAP)


# ---------------------------------------------------------------------------
# premint_od
# ---------------------------------------------------------------------------

class TestPremintOd:
    def _premint(self):
        return replace(initial_state("alice"), phase=Phase.PREMINT, seed_price_e8=TWAP)

    def test_exact_min_ratio_accepted(self):
        q = quote_premint_od(self._premint(), _obs(balance=100_000_000), 2_500_000_000_000)
        assert (q.gross, q.fee, q.net) == (2_500_000_000_000, 0, 2_500_000_000_000)
        assert q.ratio_after_e8 == MIN_RATIO_E8

    def test_one_over_rejected(self):
        with pytest.raises(InvariantViolation):
            quote_premint_od(self._premint(), _obs(balance=100_000_000), 2_500_000_000_001)
