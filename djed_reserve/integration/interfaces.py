"""
Collaborator interfaces the reserve engine depends on.

Each call either completes or raises; the engine never inspects return codes.
Reference implementations live in `djed_reserve.state.ledgers` and
`djed_reserve.integration.price_feed`.
"""

from __future__ import annotations

from typing import Protocol

from ..state.balances import Account, Amount, AssetId


class CollateralCustodian(Protocol):
    @property
    def asset_id(self) -> AssetId: ...

    @property
    def custody_account(self) -> Account: ...

    def balance_of(self, account: Account) -> Amount: ...

    def pull(self, source: Account, amount: Amount) -> None: ...

    def push(self, dest: Account, amount: Amount) -> None: ...


class SupplyLedger(Protocol):
    """Stablecoin or reserve token, as seen by its minter."""

    def total_supply(self) -> Amount: ...

    def mint(self, to: Account, amount: Amount) -> None: ...

    def burn(self, source: Account, amount: Amount) -> None: ...


class PriceSource(Protocol):
    """AMM-style pool exposing monotonically non-decreasing cumulative prices."""

    def cumulative_price(self, side: int) -> int: ...

    def first_asset_identity(self) -> AssetId: ...

    def second_asset_identity(self) -> AssetId: ...


class Clock(Protocol):
    def current_block_height(self) -> int: ...


class PriceSourceRegistry(Protocol):
    """Resolves the ``pool_ref`` recorded in state to a live price source."""

    def resolve(self, pool_ref: str) -> PriceSource: ...
