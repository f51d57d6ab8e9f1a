"""Effect functions for the reserve engine.

One pure function per action. Each builds the ``Effect`` from the POST-state
and the guard's quote. ``Effect.transfers`` is the exact, ordered list of
collaborator calls the shell performs; any collateral push comes last.
"""

from __future__ import annotations

from .types import ActionParams, Effect, Event, Observation, Quote, ReserveState, Transfer, TransferKind


def _priced(event: Event, quote: Quote, *transfers: Transfer) -> Effect:
    return Effect(
        event=event,
        twap_e8=quote.twap_e8,
        gross=quote.gross,
        fee=quote.fee,
        net=quote.net,
        ratio_after_e8=quote.ratio_after_e8,
        transfers=transfers,
    )


def effect_mint_orc(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote) -> Effect:
    return _priced(
        Event.ORC_MINTED, quote,
        Transfer(TransferKind.PULL_COLLATERAL, obs.caller, params.amount),
        Transfer(TransferKind.MINT_RESERVE, obs.caller, quote.net),
    )


def effect_burn_orc(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote) -> Effect:
    return _priced(
        Event.ORC_BURNED, quote,
        Transfer(TransferKind.BURN_RESERVE, obs.caller, params.amount),
        Transfer(TransferKind.PUSH_COLLATERAL, obs.caller, quote.net),
    )


def effect_mint_od(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote) -> Effect:
    return _priced(
        Event.OD_MINTED, quote,
        Transfer(TransferKind.PULL_COLLATERAL, obs.caller, params.amount),
        Transfer(TransferKind.MINT_STABLE, obs.caller, quote.net),
    )


def effect_burn_od(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote) -> Effect:
    return _priced(
        Event.OD_BURNED, quote,
        Transfer(TransferKind.BURN_STABLE, obs.caller, params.amount),
        Transfer(TransferKind.PUSH_COLLATERAL, obs.caller, quote.net),
    )


def effect_premint_od(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote) -> Effect:
    return _priced(
        Event.OD_PREMINTED, quote,
        Transfer(TransferKind.MINT_STABLE, state.owner, quote.net),
    )


def effect_advance_phase(state: ReserveState, params: ActionParams, obs: Observation, quote: None) -> Effect:
    return Effect(event=Event.PHASE_ADVANCED)


def effect_init_pool(state: ReserveState, params: ActionParams, obs: Observation, quote: None) -> Effect:
    return Effect(event=Event.POOL_BOUND, twap_e8=state.last_twap_e8)


def effect_update_twap_snapshot(state: ReserveState, params: ActionParams, obs: Observation, quote: None) -> Effect:
    return Effect(event=Event.SNAPSHOT_UPDATED, twap_e8=state.last_twap_e8)


def effect_transfer_ownership(state: ReserveState, params: ActionParams, obs: Observation, quote: None) -> Effect:
    return Effect(event=Event.OWNERSHIP_TRANSFERRED)


def effect_sample(state: ReserveState, params: ActionParams, obs: Observation, quote: Quote) -> Effect:
    return Effect(event=Event.TWAP_SAMPLED, twap_e8=quote.twap_e8)
