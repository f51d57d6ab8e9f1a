"""Data types for the reserve engine.

All types are frozen dataclasses (immutable).

Units/conventions:
- `*_e8` values are fixed-point scaled by 1e8 (`RATIO_SCALE`).
- `twap_e8` / `seed_price_e8` are stablecoin units per whole collateral unit, scaled by 1e8.
- `*_ratio_e8` values are collateral value / stablecoin liabilities, scaled by 1e8 (400% = 4e8).
- plain amounts are integer base units of the asset they refer to.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, unique


@unique
class Phase(IntEnum):
    """Bootstrap lifecycle. Ordered: a phase never moves to a lower value."""
    SEEDING = 0
    PREMINT = 1
    LIVE = 2


@unique
class Action(Enum):
    """One member per engine entry point that may change state."""
    MINT_ORC = "mint_orc"
    BURN_ORC = "burn_orc"
    MINT_OD = "mint_od"
    BURN_OD = "burn_od"
    PREMINT_OD = "premint_od"
    ADVANCE_PHASE = "advance_phase"
    INIT_POOL = "init_pool"
    UPDATE_TWAP_SNAPSHOT = "update_twap_snapshot"
    TRANSFER_OWNERSHIP = "transfer_ownership"
    SAMPLE = "sample"


@unique
class Event(Enum):
    """One member per accepted action."""
    ORC_MINTED = "OrcMinted"
    ORC_BURNED = "OrcBurned"
    OD_MINTED = "OdMinted"
    OD_BURNED = "OdBurned"
    OD_PREMINTED = "OdPreminted"
    PHASE_ADVANCED = "PhaseAdvanced"
    POOL_BOUND = "PoolBound"
    SNAPSHOT_UPDATED = "SnapshotUpdated"
    OWNERSHIP_TRANSFERRED = "OwnershipTransferred"
    TWAP_SAMPLED = "TwapSampled"


@unique
class TransferKind(Enum):
    PULL_COLLATERAL = "pull_collateral"
    PUSH_COLLATERAL = "push_collateral"
    MINT_STABLE = "mint_stable"
    BURN_STABLE = "burn_stable"
    MINT_RESERVE = "mint_reserve"
    BURN_RESERVE = "burn_reserve"


@dataclass(frozen=True)
class ReserveState:
    """Complete engine-owned state. Balances and supplies live in collaborators."""

    # Phase
    phase: Phase = Phase.SEEDING
    seed_price_e8: int = 0
    premint_done: bool = False

    # Oracle binding + snapshot
    pool_ref: str | None = None
    collateral_is_first_asset: bool = False
    snapshot_seen: bool = False
    snapshot_cumulative: int = 0
    snapshot_block: int = 0
    last_twap_e8: int = 0

    # Control parameters
    owner: str = ""
    fee_rate_e8: int = 1_500_000
    twap_window_blocks: int = 6


@dataclass(frozen=True)
class Observation:
    """Collaborator readings taken by the shell right before a step.

    `cumulative_price` is None when the oracle is unbound (nothing to read).
    """

    caller: str
    block_height: int = 0
    cumulative_price: int | None = None
    collateral_balance: int = 0
    stable_supply: int = 0
    reserve_supply: int = 0


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields keep their defaults."""

    action: Action
    amount: int = 0                               # mint_* / burn_* / premint_od
    seed_price_e8: int = 0                        # advance_phase
    pool_ref: str = ""                            # init_pool
    pool_first_asset_is_collateral: bool = False  # init_pool
    new_owner: str = ""                           # transfer_ownership


@dataclass(frozen=True)
class Transfer:
    """One collaborator call the shell must perform, in order."""

    kind: TransferKind
    account: str
    amount: int


@dataclass(frozen=True)
class Quote:
    """Priced output leg of a mint/burn before any transfer happens."""

    gross: int
    fee: int
    net: int
    twap_e8: int = 0
    ratio_after_e8: int = 0


@dataclass(frozen=True)
class Effect:
    """Post-step observables emitted after a successful step."""

    event: Event
    twap_e8: int = 0
    gross: int = 0
    fee: int = 0
    net: int = 0
    ratio_after_e8: int = 0
    transfers: tuple[Transfer, ...] = ()


@dataclass(frozen=True)
class StepResult:
    """Result of a single engine step."""

    accepted: bool
    state: ReserveState | None = None
    effect: Effect | None = None
    rejection: str | None = None
