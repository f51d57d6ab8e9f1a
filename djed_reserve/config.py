"""
Deploy-time configuration for a reserve engine.

Loaded from a YAML mapping, e.g.::

    owner: "0xa1..."
    collateral_asset: "BTC"
    engine_identity: "reserve"
    fee_rate_e8: 1500000
    twap_window_blocks: 6

Unknown keys are rejected so a typo never silently falls back to a default.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .core.reserve.math import DEFAULT_FEE_RATE_E8, DEFAULT_TWAP_WINDOW_BLOCKS, MAX_FEE_RATE_E8


def _require_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    if not value:
        raise ValueError(f"{name} must be non-empty")
    return value


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    return int(value)


@dataclass(frozen=True)
class ReserveConfig:
    owner: str
    collateral_asset: str
    engine_identity: str = "reserve"
    fee_rate_e8: int = DEFAULT_FEE_RATE_E8
    twap_window_blocks: int = DEFAULT_TWAP_WINDOW_BLOCKS

    def __post_init__(self) -> None:
        _require_str(self.owner, name="owner")
        _require_str(self.collateral_asset, name="collateral_asset")
        _require_str(self.engine_identity, name="engine_identity")
        fee = _require_int(self.fee_rate_e8, name="fee_rate_e8")
        if not 0 <= fee <= MAX_FEE_RATE_E8:
            raise ValueError(f"fee_rate_e8 must be in [0, {MAX_FEE_RATE_E8}]: {fee}")
        window = _require_int(self.twap_window_blocks, name="twap_window_blocks")
        if window < 1:
            raise ValueError(f"twap_window_blocks must be >= 1: {window}")


_CONFIG_KEYS = frozenset(f.name for f in fields(ReserveConfig))
_REQUIRED_KEYS = frozenset({"owner", "collateral_asset"})


def config_from_mapping(obj: Mapping[str, Any]) -> ReserveConfig:
    if not isinstance(obj, Mapping):
        raise ValueError("reserve config must be a mapping")
    unknown = sorted(set(obj) - _CONFIG_KEYS)
    if unknown:
        raise ValueError(f"unknown reserve config keys: {', '.join(map(str, unknown))}")
    missing = sorted(_REQUIRED_KEYS - set(obj))
    if missing:
        raise ValueError(f"missing reserve config keys: {', '.join(missing)}")
    return ReserveConfig(**dict(obj))


def load_config(path: Union[str, Path]) -> ReserveConfig:
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if not isinstance(obj, Mapping):
        raise ValueError(f"reserve config must be a YAML mapping: {path}")
    return config_from_mapping(obj)
