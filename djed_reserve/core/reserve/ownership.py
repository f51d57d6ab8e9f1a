"""Single-owner access control."""

from __future__ import annotations

from dataclasses import replace

from .errors import ValidationError
from .types import ReserveState


def is_owner(state: ReserveState, caller: str) -> bool:
    return bool(state.owner) and caller == state.owner


def require_owner(state: ReserveState, caller: str) -> None:
    if not is_owner(state, caller):
        raise ValidationError("caller is not owner")


def transfer_ownership(state: ReserveState, caller: str, new_owner: str) -> ReserveState:
    require_owner(state, caller)
    if not new_owner:
        raise ValidationError("new owner must be non-empty")
    return replace(state, owner=new_owner)
