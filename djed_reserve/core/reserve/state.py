"""State construction and serialization for the reserve engine.

`initial_state()` returns the deploy-time state: SEEDING, no seed price,
premint not done, oracle unbound.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s` for all valid states.
"""

from __future__ import annotations

from typing import Any, Mapping

from .errors import ValidationError
from .math import DEFAULT_FEE_RATE_E8, DEFAULT_TWAP_WINDOW_BLOCKS, MAX_FEE_RATE_E8
from .types import Phase, ReserveState

# Auto-derived from ReserveState field definitions (single source of truth).
STATE_VAR_NAMES: tuple[str, ...] = tuple(ReserveState.__dataclass_fields__)

_STR_FIELDS = frozenset({"owner"})
_OPTIONAL_STR_FIELDS = frozenset({"pool_ref"})


def initial_state(
    owner: str,
    *,
    fee_rate_e8: int = DEFAULT_FEE_RATE_E8,
    twap_window_blocks: int = DEFAULT_TWAP_WINDOW_BLOCKS,
) -> ReserveState:
    """Return the deploy-time ReserveState for ``owner``."""
    if not owner:
        raise ValidationError("owner must be non-empty")
    if not 0 <= fee_rate_e8 <= MAX_FEE_RATE_E8:
        raise ValidationError(f"fee_rate_e8 must be in [0, {MAX_FEE_RATE_E8}]")
    if twap_window_blocks < 1:
        raise ValidationError("twap_window_blocks must be >= 1")
    return ReserveState(
        owner=owner,
        fee_rate_e8=fee_rate_e8,
        twap_window_blocks=twap_window_blocks,
    )


def state_to_dict(state: ReserveState) -> dict[str, Any]:
    """Serialize a ReserveState to a plain JSON-compatible dict."""
    out: dict[str, Any] = {name: getattr(state, name) for name in STATE_VAR_NAMES}
    out["phase"] = int(state.phase)
    return out


def state_from_dict(d: Mapping[str, Any]) -> ReserveState:
    """Deserialize a dict to a ReserveState. Raises KeyError on missing fields."""
    kwargs: dict[str, Any] = {}
    for name in STATE_VAR_NAMES:
        val = d[name]
        if name == "phase":
            if isinstance(val, bool) or not isinstance(val, int):
                raise TypeError(f"state var 'phase' must be int, got {type(val).__name__}")
            kwargs[name] = Phase(val)
        elif name in _OPTIONAL_STR_FIELDS:
            if val is not None and not isinstance(val, str):
                raise TypeError(f"state var {name!r} must be str|None, got {type(val).__name__}")
            kwargs[name] = val
        elif name in _STR_FIELDS:
            if not isinstance(val, str):
                raise TypeError(f"state var {name!r} must be str, got {type(val).__name__}")
            kwargs[name] = val
        elif isinstance(val, bool):
            kwargs[name] = val
        elif isinstance(val, int):
            kwargs[name] = int(val)
        else:
            raise TypeError(f"state var {name!r} must be bool|int, got {type(val).__name__}")
    return ReserveState(**kwargs)
