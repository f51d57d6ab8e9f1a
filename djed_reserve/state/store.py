"""
Persistence for the reserve engine's `ReserveState`.

The engine only needs get/set. Two backends:
- `InMemoryStateStore`: a single slot,
- `JsonFileStateStore`: a versioned canonical-JSON document carrying a
  domain-separated commitment, replaced atomically on every write.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol, Union

from ..core.reserve.state import state_from_dict, state_to_dict
from ..core.reserve.types import ReserveState
from .canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex


RESERVE_STATE_VERSION = 1


def state_commitment_hex(state: ReserveState, *, version: int = RESERVE_STATE_VERSION) -> str:
    """SHA-256 over ``domain_sep("reserve_state") || canonical_json(state)``."""
    payload = domain_sep_bytes("reserve_state", version=version) + canonical_json_bytes(state_to_dict(state))
    return sha256_hex(payload)


def encode_state_document(state: ReserveState) -> dict[str, Any]:
    return {
        "version": RESERVE_STATE_VERSION,
        "state": state_to_dict(state),
        "commitment": state_commitment_hex(state),
    }


def decode_state_document(doc: Mapping[str, Any]) -> ReserveState:
    """Inverse of `encode_state_document`. Rejects unknown versions and bad commitments."""
    if not isinstance(doc, Mapping):
        raise TypeError("state document must be a mapping")
    version = doc.get("version")
    if version != RESERVE_STATE_VERSION:
        raise ValueError(f"unsupported state document version: {version!r}")
    raw = doc.get("state")
    if not isinstance(raw, Mapping):
        raise TypeError("state document 'state' must be a mapping")
    state = state_from_dict(raw)
    if doc.get("commitment") != state_commitment_hex(state):
        raise ValueError("state document commitment mismatch")
    return state


class StateStore(Protocol):
    def get(self) -> Optional[ReserveState]: ...

    def set(self, state: ReserveState) -> None: ...


class InMemoryStateStore:
    def __init__(self, state: Optional[ReserveState] = None):
        self._state = state

    def get(self) -> Optional[ReserveState]:
        return self._state

    def set(self, state: ReserveState) -> None:
        self._state = state


class JsonFileStateStore:
    """File-backed store. A missing file reads as "no state yet"."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> Optional[ReserveState]:
        if not self._path.is_file():
            return None
        doc = json.loads(self._path.read_text(encoding="utf-8"))
        return decode_state_document(doc)

    def set(self, state: ReserveState) -> None:
        data = canonical_json_bytes(encode_state_document(state))
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self._path.parent), prefix=".reserve_state_", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, self._path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
