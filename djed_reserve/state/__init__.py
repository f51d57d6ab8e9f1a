"""
State management for the reserve: balances, persistence, reference ledgers
"""

from .balances import BalanceTable
from .ledgers import InMemoryCustodian, InMemorySupplyLedger, MinterHandle
from .nonces import NonceTable
from .store import InMemoryStateStore, JsonFileStateStore, StateStore, state_commitment_hex

__all__ = [
    "BalanceTable",
    "InMemoryCustodian",
    "InMemorySupplyLedger",
    "MinterHandle",
    "NonceTable",
    "InMemoryStateStore",
    "JsonFileStateStore",
    "StateStore",
    "state_commitment_hex",
]
