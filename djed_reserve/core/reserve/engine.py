"""Dispatch-table engine for the reserve.

``step(state, params, obs)`` is the single entry point. It:

1. Validates parameter domains.
2. Samples the oracle first for the economic actions (this may commit a
   snapshot and promote PREMINT to LIVE).
3. Dispatches to the guard / update / effect functions.
4. Checks all invariants on the post-state and over the transition.
5. Returns a ``StepResult`` (accepted, or rejected with a reason string of
   the form ``"<kind>:<reason>"``).

The step is pure: collaborator readings come in through ``Observation`` and
the value movements go out as ``Effect.transfers``.
"""

from __future__ import annotations

from typing import Callable

from . import oracle
from .effects import (
    effect_advance_phase,
    effect_burn_od,
    effect_burn_orc,
    effect_init_pool,
    effect_mint_od,
    effect_mint_orc,
    effect_premint_od,
    effect_sample,
    effect_transfer_ownership,
    effect_update_twap_snapshot,
)
from .errors import InvariantViolation, ReserveError, ValidationError
from .guards import (
    guard_advance_phase,
    guard_burn_od,
    guard_burn_orc,
    guard_init_pool,
    guard_mint_od,
    guard_mint_orc,
    guard_premint_od,
    guard_sample,
    guard_transfer_ownership,
    guard_update_twap_snapshot,
)
from .invariants import check_all, check_transition
from .math import MAX_AMOUNT
from .types import Action, ActionParams, Effect, Observation, Quote, ReserveState, StepResult
from .updates import (
    apply_advance_phase,
    apply_init_pool,
    apply_premint_od,
    apply_transfer_ownership,
    apply_unchanged,
    apply_update_twap_snapshot,
)

GuardFn = Callable[[ReserveState, ActionParams, Observation, int], "Quote | None"]
UpdateFn = Callable[[ReserveState, ActionParams, Observation, "Quote | None"], ReserveState]
EffectFn = Callable[[ReserveState, ActionParams, Observation, "Quote | None"], Effect]

_DISPATCH: dict[Action, tuple[GuardFn, UpdateFn, EffectFn]] = {
    Action.MINT_ORC: (guard_mint_orc, apply_unchanged, effect_mint_orc),
    Action.BURN_ORC: (guard_burn_orc, apply_unchanged, effect_burn_orc),
    Action.MINT_OD: (guard_mint_od, apply_unchanged, effect_mint_od),
    Action.BURN_OD: (guard_burn_od, apply_unchanged, effect_burn_od),
    Action.PREMINT_OD: (guard_premint_od, apply_premint_od, effect_premint_od),
    Action.ADVANCE_PHASE: (guard_advance_phase, apply_advance_phase, effect_advance_phase),
    Action.INIT_POOL: (guard_init_pool, apply_init_pool, effect_init_pool),
    Action.UPDATE_TWAP_SNAPSHOT: (
        guard_update_twap_snapshot, apply_update_twap_snapshot, effect_update_twap_snapshot,
    ),
    Action.TRANSFER_OWNERSHIP: (
        guard_transfer_ownership, apply_transfer_ownership, effect_transfer_ownership,
    ),
    Action.SAMPLE: (guard_sample, apply_unchanged, effect_sample),
}

# Actions that read the oracle (and may commit it) before their own guard.
SAMPLING_ACTIONS: frozenset[Action] = frozenset({
    Action.MINT_ORC,
    Action.BURN_ORC,
    Action.MINT_OD,
    Action.BURN_OD,
    Action.SAMPLE,
})

# -- Parameter domain bounds --------------------------------------------------

# Per-action bounds: list of (field_name, min_val, max_val).
_PARAM_BOUNDS: dict[Action, list[tuple[str, int, int]]] = {
    Action.MINT_ORC: [("amount", 1, MAX_AMOUNT)],
    Action.BURN_ORC: [("amount", 1, MAX_AMOUNT)],
    Action.MINT_OD: [("amount", 1, MAX_AMOUNT)],
    Action.BURN_OD: [("amount", 1, MAX_AMOUNT)],
    Action.PREMINT_OD: [("amount", 1, MAX_AMOUNT)],
    Action.ADVANCE_PHASE: [("seed_price_e8", 1, MAX_AMOUNT)],
    Action.INIT_POOL: [],
    Action.UPDATE_TWAP_SNAPSHOT: [],
    Action.TRANSFER_OWNERSHIP: [],
    Action.SAMPLE: [],
}


def _validate_params(params: ActionParams) -> str | None:
    """Check parameter domain bounds. Returns rejection reason or None."""
    bounds = _PARAM_BOUNDS.get(params.action)
    if bounds is None:
        return None
    for field, lo, hi in bounds:
        val = getattr(params, field)
        if not isinstance(val, int) or isinstance(val, bool):
            return f"param_domain:{field}"
        if val < lo or val > hi:
            return f"param_domain:{field}"
    return None


def step(state: ReserveState, params: ActionParams, obs: Observation) -> StepResult:
    """Execute one action against the given state and collaborator observation.

    Returns ``StepResult`` with ``accepted=True`` on success,
    or ``accepted=False`` with a ``rejection`` reason string.
    """
    entry = _DISPATCH.get(params.action)
    if entry is None:
        return StepResult(accepted=False, rejection=f"validation:unknown_action:{params.action}")

    domain_err = _validate_params(params)
    if domain_err is not None:
        return StepResult(accepted=False, rejection=f"validation:{domain_err}")

    guard_fn, update_fn, effect_fn = entry

    try:
        if params.action in SAMPLING_ACTIONS:
            sampled, twap_e8 = oracle.sample(state, obs.cumulative_price, obs.block_height)
        else:
            sampled, twap_e8 = state, state.last_twap_e8
        quote = guard_fn(sampled, params, obs, twap_e8)
        new_state = update_fn(sampled, params, obs, quote)
        effect = effect_fn(new_state, params, obs, quote)
    except ValidationError as exc:
        return StepResult(accepted=False, rejection=f"validation:{exc}")
    except InvariantViolation as exc:
        return StepResult(accepted=False, rejection=f"invariant:{','.join(exc.violations)}")

    violations = check_all(new_state) + check_transition(state, new_state, obs.block_height)
    if violations:
        return StepResult(
            accepted=False,
            rejection=f"invariant:{','.join(violations)}",
        )

    return StepResult(accepted=True, state=new_state, effect=effect)


def step_or_raise(state: ReserveState, params: ActionParams, obs: Observation) -> StepResult:
    """Like ``step()`` but raises on rejection instead of returning a result.

    Raises:
        ValidationError: Bad parameter, wrong phase, consumed one-shot or non-owner caller.
        InvariantViolation: Ratio bound, oracle availability or post-state invariant.
    """
    result = step(state, params, obs)
    if result.accepted:
        return result
    raise rejection_error(result.rejection or "")


def rejection_error(reason: str) -> ReserveError:
    """Map a ``StepResult.rejection`` string back to its exception."""
    if reason.startswith("validation:"):
        return ValidationError(reason.removeprefix("validation:"))
    if reason.startswith("invariant:"):
        return InvariantViolation(reason.removeprefix("invariant:").split(","))
    return ReserveError(reason)
