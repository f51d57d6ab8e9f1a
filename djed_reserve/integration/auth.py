"""
Signed-call authentication for the reserve engine.

A caller identity is a BLS12-381 public key (48 bytes, 0x-prefixed hex). A
`SignedCall` carries the action, its arguments, a strictly sequential per-signer
nonce and a G2 signature over::

    SHA256( domain_sep("reserve_call:<engine_identity>", v1) || canonical_json(signing_dict) )

`verify_signed_call` checks the signature and consumes the nonce; only then is
the verified pubkey handed to the engine as ``caller``. A failed verification
consumes nothing.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from py_ecc.bls import G2Basic

from ..core.reserve.errors import ValidationError
from ..core.reserve.types import Effect
from ..state.canonical import (
    canonical_hex_fixed_allow_0x,
    canonical_json_bytes,
    domain_sep_bytes,
    hex_to_bytes_allow_0x,
)
from ..state.nonces import NonceTable
from .reserve_engine import ReserveEngine

PUBKEY_NBYTES = 48
SIGNATURE_NBYTES = 96

# action -> (argument names in call order)
CALL_ARGS: dict[str, tuple[str, ...]] = {
    "mint_orc": ("amount",),
    "burn_orc": ("amount",),
    "mint_od": ("amount",),
    "burn_od": ("amount",),
    "premint_od": ("amount",),
    "advance_phase": ("seed_price_e8",),
    "init_pool": ("pool_ref",),
    "update_twap_snapshot": (),
    "transfer_ownership": ("new_owner",),
}


@dataclass(frozen=True)
class SignedCall:
    signer_pubkey: str
    nonce: int
    action: str
    args: Dict[str, Any] = field(default_factory=dict)
    signature: str = ""


def _signing_dict(call: SignedCall) -> Dict[str, Any]:
    expected = CALL_ARGS.get(call.action)
    if expected is None:
        raise ValidationError(f"unsupported signed action: {call.action}")
    if set(call.args) != set(expected):
        raise ValidationError(f"{call.action} expects args {list(expected)}, got {sorted(call.args)}")
    return {
        "action": call.action,
        "args": dict(call.args),
        "nonce": int(call.nonce),
        "signer_pubkey": canonical_hex_fixed_allow_0x(call.signer_pubkey, nbytes=PUBKEY_NBYTES, name="signer_pubkey"),
    }


def signing_message_hash(call: SignedCall, *, engine_identity: str) -> bytes:
    payload = canonical_json_bytes(_signing_dict(call))
    msg = domain_sep_bytes(f"reserve_call:{engine_identity}", version=1) + payload
    return hashlib.sha256(msg).digest()


def sign_call(
    secret_key: int,
    *,
    action: str,
    args: Mapping[str, Any],
    nonce: int,
    engine_identity: str,
) -> SignedCall:
    """Build and sign a call with ``secret_key`` (a py_ecc BLS secret key)."""
    pubkey_hex = "0x" + G2Basic.SkToPk(secret_key).hex()
    unsigned = SignedCall(signer_pubkey=pubkey_hex, nonce=nonce, action=action, args=dict(args))
    sig = G2Basic.Sign(secret_key, signing_message_hash(unsigned, engine_identity=engine_identity))
    return SignedCall(
        signer_pubkey=pubkey_hex,
        nonce=nonce,
        action=action,
        args=dict(args),
        signature="0x" + sig.hex(),
    )


def verify_signed_call(call: SignedCall, nonces: NonceTable, *, engine_identity: str) -> str:
    """Return the canonical signer pubkey, consuming its nonce. Raises ValidationError."""
    try:
        signer = canonical_hex_fixed_allow_0x(call.signer_pubkey, nbytes=PUBKEY_NBYTES, name="signer_pubkey")
        pubkey_bytes = hex_to_bytes_allow_0x(call.signer_pubkey, nbytes=PUBKEY_NBYTES, name="signer_pubkey")
        sig_bytes = hex_to_bytes_allow_0x(call.signature, nbytes=SIGNATURE_NBYTES, name="signature")
    except (TypeError, ValueError) as exc:
        raise ValidationError(str(exc)) from exc

    if not isinstance(call.nonce, int) or isinstance(call.nonce, bool):
        raise ValidationError("nonce must be an int")
    if call.nonce != nonces.next_expected(signer):
        raise ValidationError("nonce invalid")

    msg_hash = signing_message_hash(call, engine_identity=engine_identity)
    try:
        ok = bool(G2Basic.Verify(pubkey_bytes, msg_hash, sig_bytes))
    except Exception as exc:
        raise ValidationError(f"signature verification error: {exc}") from exc
    if not ok:
        raise ValidationError("invalid signature")

    nonces.set_last(signer, call.nonce)
    return signer


def dispatch_signed(engine: ReserveEngine, call: SignedCall, nonces: NonceTable) -> Effect:
    """Verify ``call`` and run it on ``engine`` as the signer.

    The nonce is consumed once the signature verifies, even if the engine then
    rejects the operation, so a rejected call cannot be replayed later.
    """
    caller = verify_signed_call(call, nonces, engine_identity=engine.config.engine_identity)
    method = getattr(engine, call.action)
    args = [call.args[name] for name in CALL_ARGS[call.action]]
    return method(caller, *args)
