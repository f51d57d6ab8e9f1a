"""
Nonce table for signed-call replay protection.

Tracks, per signer pubkey, the last accepted call nonce. Policy is strict
sequential nonces (see `djed_reserve.integration.auth`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from .balances import Account
from .canonical import canonical_hex_fixed_allow_0x

_U32_MAX = 0xFFFFFFFF


@dataclass
class NonceTable:
    """Mutable mapping: signer_pubkey -> last_used_nonce."""

    _last: Dict[Account, int] = field(default_factory=dict)

    def get_last(self, pubkey: Account) -> int:
        pk = canonical_hex_fixed_allow_0x(pubkey, nbytes=48, name="pubkey")
        return self._last.get(pk, 0)

    def next_expected(self, pubkey: Account) -> int:
        return self.get_last(pubkey) + 1

    def set_last(self, pubkey: Account, last_nonce: int) -> None:
        if not isinstance(last_nonce, int) or isinstance(last_nonce, bool) or last_nonce < 0:
            raise TypeError("last_nonce must be a non-negative int")
        if last_nonce > _U32_MAX:
            raise TypeError("last_nonce must fit in u32")
        pk = canonical_hex_fixed_allow_0x(pubkey, nbytes=48, name="pubkey")
        self._last[pk] = last_nonce

    def get_all(self) -> Mapping[Account, int]:
        return dict(self._last)
