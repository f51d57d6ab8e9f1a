"""
In-memory collateral custodian and token ledgers.

Reference collaborators for the reserve engine: deterministic, dict-backed,
sharing one `BalanceTable`. Every failure raises `ValueError` and leaves the
table untouched, which is the call-or-fail contract the engine relies on.

Token ledgers only let their minter (the reserve engine identity) mint and
burn. The ledger owner names the minter exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .balances import Account, Amount, AssetId, BalanceTable

# Account under which the custodian holds collateral inside the shared table.
CUSTODY_ACCOUNT = "custody"


class InMemoryCustodian:
    """Holds the collateral asset on behalf of the reserve."""

    def __init__(self, balances: BalanceTable, asset_id: AssetId, *, custody_account: Account = CUSTODY_ACCOUNT):
        if not asset_id:
            raise ValueError("asset_id must be non-empty")
        self._balances = balances
        self._asset_id = asset_id
        self._custody = custody_account

    @property
    def asset_id(self) -> AssetId:
        return self._asset_id

    @property
    def custody_account(self) -> Account:
        return self._custody

    def balance_of(self, account: Account) -> Amount:
        return self._balances.get(account, self._asset_id)

    def deposit(self, account: Account, amount: Amount) -> None:
        """Fund ``account`` from outside the system (faucet / test setup)."""
        self._balances.credit(account, self._asset_id, amount)

    def pull(self, source: Account, amount: Amount) -> None:
        if amount <= 0:
            raise ValueError("pull amount must be positive")
        self._balances.move(source, self._custody, self._asset_id, amount)

    def push(self, dest: Account, amount: Amount) -> None:
        if amount <= 0:
            raise ValueError("push amount must be positive")
        self._balances.move(self._custody, dest, self._asset_id, amount)


class InMemorySupplyLedger:
    """Fungible token whose supply only its minter can change."""

    def __init__(self, balances: BalanceTable, asset_id: AssetId, *, owner: Account):
        if not asset_id:
            raise ValueError("asset_id must be non-empty")
        if not owner:
            raise ValueError("owner must be non-empty")
        self._balances = balances
        self._asset_id = asset_id
        self._owner = owner
        self._minter: Optional[Account] = None
        self._supply: Amount = 0

    @property
    def asset_id(self) -> AssetId:
        return self._asset_id

    @property
    def minter(self) -> Optional[Account]:
        return self._minter

    def set_minter(self, sender: Account, minter: Account) -> None:
        if sender != self._owner:
            raise ValueError("only the ledger owner can set the minter")
        if self._minter is not None:
            raise ValueError("minter already set")
        if not minter:
            raise ValueError("minter must be non-empty")
        self._minter = minter

    def _require_minter(self, sender: Account) -> None:
        if self._minter is None or sender != self._minter:
            raise ValueError("caller is not the minter")

    def total_supply(self) -> Amount:
        return self._supply

    def balance_of(self, account: Account) -> Amount:
        return self._balances.get(account, self._asset_id)

    def mint(self, to: Account, amount: Amount, *, sender: Account) -> None:
        self._require_minter(sender)
        if amount <= 0:
            raise ValueError("mint amount must be positive")
        self._balances.credit(to, self._asset_id, amount)
        self._supply += amount

    def burn(self, source: Account, amount: Amount, *, sender: Account) -> None:
        self._require_minter(sender)
        if amount <= 0:
            raise ValueError("burn amount must be positive")
        self._balances.debit(source, self._asset_id, amount)
        self._supply -= amount

    def transfer(self, source: Account, dest: Account, amount: Amount) -> None:
        if amount <= 0:
            raise ValueError("transfer amount must be positive")
        self._balances.move(source, dest, self._asset_id, amount)

    def as_minter(self, sender: Account) -> "MinterHandle":
        """A `SupplyLedger` view whose mint/burn calls are made as ``sender``."""
        return MinterHandle(self, sender)


@dataclass(frozen=True)
class MinterHandle:
    ledger: InMemorySupplyLedger
    sender: Account

    def total_supply(self) -> Amount:
        return self.ledger.total_supply()

    def mint(self, to: Account, amount: Amount) -> None:
        self.ledger.mint(to, amount, sender=self.sender)

    def burn(self, source: Account, amount: Amount) -> None:
        self.ledger.burn(source, amount, sender=self.sender)
