"""
Controllable price source and block clock.

`CumulativePricePool` mimics the price accumulators of a constant-product
pool: for each side it keeps ``sum(price_e8 * blocks)``, advanced explicitly
by `accrue`. A TWAP over ``[b0, b1]`` is then
``(cum(b1) - cum(b0)) // (b1 - b0)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from ..core.reserve.math import RATIO_SCALE
from ..core.reserve.oracle import SIDE_FIRST, SIDE_SECOND
from ..state.balances import AssetId


@dataclass
class ManualClock:
    height: int = 0

    def current_block_height(self) -> int:
        return self.height

    def advance(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError("clock cannot move backwards")
        self.height += blocks
        return self.height


@dataclass
class CumulativePricePool:
    """Two-asset pool exposing per-side cumulative prices.

    Side 0 prices the first asset in units of the second (``*_e8``); side 1 is
    the inverse.
    """

    first_asset: AssetId
    second_asset: AssetId
    price0_cumulative: int = 0
    price1_cumulative: int = 0

    def __post_init__(self) -> None:
        if not self.first_asset or not self.second_asset:
            raise ValueError("pool assets must be non-empty")
        if self.first_asset == self.second_asset:
            raise ValueError("pool assets must differ")

    def first_asset_identity(self) -> AssetId:
        return self.first_asset

    def second_asset_identity(self) -> AssetId:
        return self.second_asset

    def cumulative_price(self, side: int) -> int:
        if side == SIDE_FIRST:
            return self.price0_cumulative
        if side == SIDE_SECOND:
            return self.price1_cumulative
        raise ValueError(f"unknown price side: {side}")

    def set_cumulative(self, side: int, value: int) -> None:
        if value < 0:
            raise ValueError("cumulative price must be non-negative")
        if side == SIDE_FIRST:
            self.price0_cumulative = value
        elif side == SIDE_SECOND:
            self.price1_cumulative = value
        else:
            raise ValueError(f"unknown price side: {side}")

    def accrue(self, price0_e8: int, blocks: int) -> None:
        """Advance both accumulators as if ``price0_e8`` held for ``blocks`` blocks."""
        if price0_e8 <= 0:
            raise ValueError("price must be positive")
        if blocks < 0:
            raise ValueError("blocks must be non-negative")
        price1_e8 = (RATIO_SCALE * RATIO_SCALE) // price0_e8
        self.price0_cumulative += price0_e8 * blocks
        self.price1_cumulative += price1_e8 * blocks


@dataclass
class PoolRegistry:
    """``pool_ref -> PriceSource`` lookup used by the engine shell."""

    pools: Dict[str, CumulativePricePool] = field(default_factory=dict)

    def register(self, pool_ref: str, pool: CumulativePricePool) -> None:
        if not pool_ref:
            raise ValueError("pool_ref must be non-empty")
        self.pools[pool_ref] = pool

    def resolve(self, pool_ref: str) -> CumulativePricePool:
        try:
            return self.pools[pool_ref]
        except KeyError:
            raise LookupError(f"unknown pool: {pool_ref}") from None
