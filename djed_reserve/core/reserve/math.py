"""Pure ratio / equity / fee arithmetic for the reserve engine.

Every function is stateless and operates on plain Python ints.

Rounding is always floor (`//`). Inputs are non-negative, so floor and
truncation agree.
"""

from __future__ import annotations

from .errors import InvariantViolation

# Domain constants
RATIO_SCALE: int = 100_000_000  # 1e8
MIN_RATIO_E8: int = 400_000_000  # 400%
MAX_RATIO_E8: int = 800_000_000  # 800%
MAX_AMOUNT: int = 2**256 - 1
RATIO_INFINITE: int = MAX_AMOUNT  # ratio reported when there are no liabilities

DEFAULT_FEE_RATE_E8: int = 1_500_000  # 1.5%
MAX_FEE_RATE_E8: int = 5_000_000  # 5%
DEFAULT_TWAP_WINDOW_BLOCKS: int = 6


# -- Ratio / equity ----------------------------------------------------------

def reserve_ratio(collateral: int, twap_e8: int, stable_supply: int) -> int:
    """Collateral value over stablecoin liabilities: ``collateral * twap / supply``.

    Returns ``RATIO_INFINITE`` when nothing is owed, never a finite number.
    """
    if stable_supply == 0:
        return RATIO_INFINITE
    return (collateral * twap_e8) // stable_supply


def liabilities_in_collateral(stable_supply: int, twap_e8: int) -> int:
    """Collateral needed to redeem the whole stablecoin supply at ``twap``."""
    return (stable_supply * RATIO_SCALE) // twap_e8


def equity_in_collateral(collateral: int, twap_e8: int, stable_supply: int) -> int:
    """Collateral in excess of stablecoin liabilities, floored at zero.

    Without a price every unit of collateral counts as equity.
    """
    if twap_e8 == 0:
        return collateral
    return max(0, collateral - liabilities_in_collateral(stable_supply, twap_e8))


def require_at_most(
    max_ratio_e8: int,
    collateral: int,
    collateral_in: int,
    twap_e8: int,
    stable_supply: int,
) -> int:
    """Ratio after ``collateral_in`` arrives; raise if it exceeds ``max_ratio_e8``."""
    ratio = reserve_ratio(collateral + collateral_in, twap_e8, stable_supply)
    if ratio > max_ratio_e8:
        raise InvariantViolation("ratio_above_max")
    return ratio


def require_at_least(
    min_ratio_e8: int,
    collateral: int,
    collateral_delta: int,
    twap_e8: int,
    stable_supply: int,
    supply_delta: int,
) -> int:
    """Ratio after both signed deltas apply; raise if it drops below ``min_ratio_e8``."""
    new_collateral = collateral + collateral_delta
    new_supply = stable_supply + supply_delta
    if new_collateral < 0 or new_supply < 0:
        raise InvariantViolation("negative_projection")
    ratio = reserve_ratio(new_collateral, twap_e8, new_supply)
    if ratio < min_ratio_e8:
        raise InvariantViolation("ratio_below_min")
    return ratio


# -- Fees --------------------------------------------------------------------

def fee_amount(gross: int, fee_rate_e8: int) -> int:
    """Fee withheld from an output leg: ``floor(gross * rate / 1e8)``."""
    return (gross * fee_rate_e8) // RATIO_SCALE


def apply_fee(gross: int, fee_rate_e8: int) -> tuple[int, int]:
    """Split ``gross`` into ``(fee, net)``. The fee never exceeds ``gross``."""
    fee = fee_amount(gross, fee_rate_e8)
    return fee, gross - fee


# -- Conversions -------------------------------------------------------------

def collateral_to_stable(collateral: int, price_e8: int) -> int:
    """Stablecoin units worth ``collateral`` at ``price_e8``."""
    return (collateral * price_e8) // RATIO_SCALE


def stable_to_collateral(stable: int, twap_e8: int) -> int:
    """Collateral units worth ``stable`` at ``twap_e8`` (``twap_e8`` must be > 0)."""
    return (stable * RATIO_SCALE) // twap_e8
