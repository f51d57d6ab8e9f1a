"""
Imperative shell around the pure reserve core.

Every public operation runs the same pipeline:

1. load `ReserveState` from the injected store,
2. read the collaborators into an `Observation` (block height, cumulative
   price on the collateral side, custody balance, both supplies),
3. run `core.reserve.step`,
4. apply `Effect.transfers` in order, journaling each one,
5. write the new state to the store.

Any rejection in (3) raises the matching `ReserveError` with nothing touched.
A collaborator failure in (2), (4) or (5) replays the journal's compensating
calls in reverse and raises `CollaboratorFailure`, so custody, supplies and
state are all left as they were. Operations run one at a time; the host
serializes requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..config import ReserveConfig
from ..core.reserve import oracle
from ..core.reserve.engine import rejection_error, step
from ..core.reserve.errors import CollaboratorFailure, ReserveError, ValidationError
from ..core.reserve.math import equity_in_collateral, reserve_ratio
from ..core.reserve.state import initial_state
from ..core.reserve.types import (
    Action,
    ActionParams,
    Effect,
    Observation,
    Phase,
    ReserveState,
    Transfer,
    TransferKind,
)
from ..state.balances import BalanceTable
from ..state.ledgers import InMemoryCustodian, InMemorySupplyLedger
from ..state.store import InMemoryStateStore, StateStore
from .interfaces import Clock, CollateralCustodian, PriceSourceRegistry, SupplyLedger
from .price_feed import ManualClock, PoolRegistry

logger = logging.getLogger(__name__)


class ReserveEngine:
    """Owns one `ReserveState` and moves value through its collaborators."""

    def __init__(
        self,
        config: ReserveConfig,
        *,
        custodian: CollateralCustodian,
        stable: SupplyLedger,
        reserve: SupplyLedger,
        pools: PriceSourceRegistry,
        clock: Clock,
        store: StateStore,
    ):
        if custodian.asset_id != config.collateral_asset:
            raise ValueError(
                f"custodian holds {custodian.asset_id!r}, config expects {config.collateral_asset!r}"
            )
        self._config = config
        self._custodian = custodian
        self._stable = stable
        self._reserve = reserve
        self._pools = pools
        self._clock = clock
        self._store = store

        if store.get() is None:
            store.set(
                initial_state(
                    config.owner,
                    fee_rate_e8=config.fee_rate_e8,
                    twap_window_blocks=config.twap_window_blocks,
                )
            )

    @property
    def config(self) -> ReserveConfig:
        return self._config

    @property
    def state(self) -> ReserveState:
        return self._load()

    # ------------------------------------------------------------------
    # Collaborator reads
    # ------------------------------------------------------------------

    def _call(self, what: str, fn: Callable[[], object]):
        try:
            return fn()
        except Exception as exc:
            raise CollaboratorFailure(f"{what} failed: {exc}") from exc

    def _load(self) -> ReserveState:
        state = self._call("state store get", self._store.get)
        if state is None:
            raise CollaboratorFailure("state store is empty")
        return state

    def _observe(self, state: ReserveState, caller: str, *, cumulative: Optional[int] = None) -> Observation:
        pool_ref = state.pool_ref
        if cumulative is None and pool_ref is not None:
            side = oracle.price_side(state)
            cumulative = self._call(
                "price source read",
                lambda: self._pools.resolve(pool_ref).cumulative_price(side),
            )
        custody = self._custodian.custody_account
        return Observation(
            caller=caller,
            block_height=self._call("clock read", self._clock.current_block_height),
            cumulative_price=cumulative,
            collateral_balance=self._call("custodian read", lambda: self._custodian.balance_of(custody)),
            stable_supply=self._call("stablecoin supply read", self._stable.total_supply),
            reserve_supply=self._call("reserve token supply read", self._reserve.total_supply),
        )

    # ------------------------------------------------------------------
    # Transfers with compensation
    # ------------------------------------------------------------------

    def _do(self, t: Transfer) -> None:
        if t.kind is TransferKind.PULL_COLLATERAL:
            self._custodian.pull(t.account, t.amount)
        elif t.kind is TransferKind.PUSH_COLLATERAL:
            self._custodian.push(t.account, t.amount)
        elif t.kind is TransferKind.MINT_STABLE:
            self._stable.mint(t.account, t.amount)
        elif t.kind is TransferKind.BURN_STABLE:
            self._stable.burn(t.account, t.amount)
        elif t.kind is TransferKind.MINT_RESERVE:
            self._reserve.mint(t.account, t.amount)
        elif t.kind is TransferKind.BURN_RESERVE:
            self._reserve.burn(t.account, t.amount)
        else:
            raise ValueError(f"unknown transfer kind: {t.kind}")

    def _undo(self, t: Transfer) -> None:
        if t.kind is TransferKind.PULL_COLLATERAL:
            self._custodian.push(t.account, t.amount)
        elif t.kind is TransferKind.PUSH_COLLATERAL:
            self._custodian.pull(t.account, t.amount)
        elif t.kind is TransferKind.MINT_STABLE:
            self._stable.burn(t.account, t.amount)
        elif t.kind is TransferKind.BURN_STABLE:
            self._stable.mint(t.account, t.amount)
        elif t.kind is TransferKind.MINT_RESERVE:
            self._reserve.burn(t.account, t.amount)
        elif t.kind is TransferKind.BURN_RESERVE:
            self._reserve.mint(t.account, t.amount)
        else:
            raise ValueError(f"unknown transfer kind: {t.kind}")

    def _rollback(self, journal: List[Transfer]) -> None:
        for t in reversed(journal):
            try:
                self._undo(t)
            except Exception as exc:
                logger.error(f"Compensation FAILED for {t.kind.value} {t.amount} {t.account}: {exc}")

    def _settle(self, transfers: tuple[Transfer, ...], new_state: ReserveState) -> None:
        journal: List[Transfer] = []
        for t in transfers:
            try:
                self._do(t)
            except Exception as exc:
                self._rollback(journal)
                raise CollaboratorFailure(f"{t.kind.value} failed: {exc}") from exc
            journal.append(t)
        try:
            self._store.set(new_state)
        except Exception as exc:
            self._rollback(journal)
            raise CollaboratorFailure(f"state store set failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(self, caller: str, params: ActionParams, *, cumulative: Optional[int] = None) -> Effect:
        state = self._load()
        obs = self._observe(state, caller, cumulative=cumulative)
        result = step(state, params, obs)
        tag = params.action.value
        if not result.accepted:
            logger.warning(f"Reserve REJECTED {tag} from {caller}: {result.rejection}")
            raise rejection_error(result.rejection or "")

        new_state, effect = result.state, result.effect
        if new_state is None or effect is None:
            raise ReserveError(f"accepted {tag} without state or effect")
        self._settle(effect.transfers, new_state)

        logger.debug(
            f"Reserve accepted {tag} from {caller}: gross={effect.gross} fee={effect.fee} "
            f"net={effect.net} twap_e8={effect.twap_e8}"
        )
        if new_state.phase is not state.phase:
            logger.info(f"Reserve phase {state.phase.name} -> {new_state.phase.name} (block {obs.block_height})")
        if new_state.owner != state.owner:
            logger.info(f"Reserve ownership {state.owner} -> {new_state.owner}")
        return effect

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    def get_phase(self) -> Phase:
        return self._load().phase

    def get_twap_window(self) -> int:
        return self._load().twap_window_blocks

    def get_twap(self, caller: str = "") -> int:
        """Sample the oracle (may commit a snapshot and promote PREMINT -> LIVE)."""
        return self._run(caller, ActionParams(action=Action.SAMPLE)).twap_e8

    sample = get_twap

    def get_reserve_ratio(self, caller: str = "") -> int:
        twap = self.get_twap(caller)
        obs = self._observe(self._load(), caller)
        return reserve_ratio(obs.collateral_balance, twap, obs.stable_supply)

    def get_equity(self, caller: str = "") -> int:
        twap = self.get_twap(caller)
        obs = self._observe(self._load(), caller)
        return equity_in_collateral(obs.collateral_balance, twap, obs.stable_supply)

    # ------------------------------------------------------------------
    # Admin surface
    # ------------------------------------------------------------------

    def advance_phase(self, caller: str, seed_price_e8: int) -> Effect:
        return self._run(caller, ActionParams(action=Action.ADVANCE_PHASE, seed_price_e8=seed_price_e8))

    def premint_od(self, caller: str, amount: int) -> Effect:
        return self._run(caller, ActionParams(action=Action.PREMINT_OD, amount=amount))

    def init_pool(self, caller: str, pool_ref: str) -> Effect:
        """Bind the oracle to ``pool_ref`` and snapshot it at the current block."""
        pool = self._call("price source lookup", lambda: self._pools.resolve(pool_ref))
        collateral = self._custodian.asset_id
        first_is_collateral = self._call("price source read", pool.first_asset_identity) == collateral
        if not first_is_collateral and self._call("price source read", pool.second_asset_identity) != collateral:
            logger.warning(f"Reserve REJECTED init_pool from {caller}: pool {pool_ref} does not price {collateral}")
            raise ValidationError(f"pool {pool_ref} does not price {collateral}")
        side = oracle.SIDE_FIRST if first_is_collateral else oracle.SIDE_SECOND
        cumulative = self._call("price source read", lambda: pool.cumulative_price(side))
        params = ActionParams(
            action=Action.INIT_POOL,
            pool_ref=pool_ref,
            pool_first_asset_is_collateral=first_is_collateral,
        )
        return self._run(caller, params, cumulative=cumulative)

    def update_twap_snapshot(self, caller: str = "") -> Effect:
        return self._run(caller, ActionParams(action=Action.UPDATE_TWAP_SNAPSHOT))

    def transfer_ownership(self, caller: str, new_owner: str) -> Effect:
        return self._run(caller, ActionParams(action=Action.TRANSFER_OWNERSHIP, new_owner=new_owner))

    # ------------------------------------------------------------------
    # Economic surface
    # ------------------------------------------------------------------

    def mint_orc(self, caller: str, collateral_in: int) -> Effect:
        return self._run(caller, ActionParams(action=Action.MINT_ORC, amount=collateral_in))

    def burn_orc(self, caller: str, reserve_in: int) -> Effect:
        return self._run(caller, ActionParams(action=Action.BURN_ORC, amount=reserve_in))

    def mint_od(self, caller: str, collateral_in: int) -> Effect:
        return self._run(caller, ActionParams(action=Action.MINT_OD, amount=collateral_in))

    def burn_od(self, caller: str, stable_in: int) -> Effect:
        return self._run(caller, ActionParams(action=Action.BURN_OD, amount=stable_in))


# ---------------------------------------------------------------------------
# In-memory deployment
# ---------------------------------------------------------------------------

STABLE_ASSET = "OD"
RESERVE_ASSET = "ORC"


@dataclass
class InMemoryDeployment:
    """A reserve engine wired to dict-backed collaborators sharing one balance table."""

    config: ReserveConfig
    balances: BalanceTable
    custodian: InMemoryCustodian
    stable: InMemorySupplyLedger
    reserve: InMemorySupplyLedger
    pools: PoolRegistry
    clock: ManualClock
    store: StateStore
    engine: ReserveEngine = field(init=False)

    def __post_init__(self) -> None:
        self.engine = ReserveEngine(
            self.config,
            custodian=self.custodian,
            stable=self.stable.as_minter(self.config.engine_identity),
            reserve=self.reserve.as_minter(self.config.engine_identity),
            pools=self.pools,
            clock=self.clock,
            store=self.store,
        )


def deploy_in_memory(
    config: ReserveConfig,
    *,
    store: Optional[StateStore] = None,
    start_block: int = 0,
) -> InMemoryDeployment:
    """Wire a fresh engine; both token ledgers name the engine as their only minter."""
    balances = BalanceTable()
    custodian = InMemoryCustodian(balances, config.collateral_asset)
    stable = InMemorySupplyLedger(balances, STABLE_ASSET, owner=config.owner)
    reserve = InMemorySupplyLedger(balances, RESERVE_ASSET, owner=config.owner)
    stable.set_minter(config.owner, config.engine_identity)
    reserve.set_minter(config.owner, config.engine_identity)
    return InMemoryDeployment(
        config=config,
        balances=balances,
        custodian=custodian,
        stable=stable,
        reserve=reserve,
        pools=PoolRegistry(),
        clock=ManualClock(height=start_block),
        store=store if store is not None else InMemoryStateStore(),
    )
