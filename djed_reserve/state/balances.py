"""
Multi-asset balance tracking.

Implements BalanceTable[Account, AssetId] -> Amount. One table backs the
in-memory custodian and both in-memory token ledgers, so a single snapshot of
it captures every balance the reserve can move.
"""

from typing import Dict, Tuple


# Type aliases
Account = str  # caller identity (BLS12-381 public key hex for signed calls)
AssetId = str
Amount = int  # Non-negative integer (arbitrary precision)


class BalanceTable:
    """
    Balance table mapping (account, asset) -> amount.

    Zero balances are not stored. Callers that hash or print balances must sort
    keys themselves; dict order is not part of the contract.
    """

    def __init__(self):
        self._balances: Dict[Tuple[Account, AssetId], Amount] = {}

    def get(self, account: Account, asset: AssetId) -> Amount:
        """Balance for (account, asset); 0 if absent."""
        return self._balances.get((account, asset), 0)

    def set(self, account: Account, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (account, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((account, asset), None)
        else:
            self._balances[(account, asset)] = amount

    def credit(self, account: Account, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Credit must be non-negative: {amount}")
        self.set(account, asset, self.get(account, asset) + amount)

    def debit(self, account: Account, asset: AssetId, amount: Amount) -> None:
        """
        Remove ``amount`` from (account, asset).

        Raises:
            ValueError: If amount is negative or the balance is insufficient
        """
        if amount < 0:
            raise ValueError(f"Debit must be non-negative: {amount}")
        current = self.get(account, asset)
        if current < amount:
            raise ValueError(f"Insufficient balance: {current} < {amount}")
        self.set(account, asset, current - amount)

    def move(self, source: Account, dest: Account, asset: AssetId, amount: Amount) -> None:
        """Debit ``source`` then credit ``dest``; nothing changes if the debit fails."""
        self.debit(source, asset, amount)
        self.credit(dest, asset, amount)

    def total(self, asset: AssetId) -> Amount:
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def get_all_balances(self) -> Dict[Tuple[Account, AssetId], Amount]:
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
