#!/usr/bin/env python3
"""
Run a YAML scenario against an in-memory reserve deployment and print JSON.

Scenario shape::

    config:            # ReserveConfig keys
      owner: alice
      collateral_asset: BTC
    pools:             # pool_ref -> assets
      main: {first_asset: BTC, second_asset: OD}
    funds:             # collateral handed to accounts before step 0
      alice: 1000000000
    steps:
      - {op: mint_orc, caller: alice, amount: 1000000000}
      - {op: advance_phase, caller: alice, seed_price_e8: 10000000000000}
      - {op: init_pool, caller: alice, pool_ref: main}
      - {op: accrue, pool: main, price_e8: 10000000000000, blocks: 6}
      - {op: get_twap}

``accrue`` advances the pool accumulators and the clock together;
``advance_blocks`` moves only the clock. Any other ``op`` is a `ReserveEngine`
method. A rejected step is recorded and the run continues.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from djed_reserve.config import config_from_mapping
from djed_reserve.core.reserve.errors import ReserveError
from djed_reserve.core.reserve.state import state_to_dict
from djed_reserve.core.reserve.types import Effect
from djed_reserve.integration.price_feed import CumulativePricePool
from djed_reserve.integration.reserve_engine import InMemoryDeployment, deploy_in_memory
from djed_reserve.state.store import state_commitment_hex


class ScenarioError(ValueError):
    pass


_ENGINE_OPS: dict[str, tuple[str, ...]] = {
    "mint_orc": ("caller", "amount"),
    "burn_orc": ("caller", "amount"),
    "mint_od": ("caller", "amount"),
    "burn_od": ("caller", "amount"),
    "premint_od": ("caller", "amount"),
    "advance_phase": ("caller", "seed_price_e8"),
    "init_pool": ("caller", "pool_ref"),
    "update_twap_snapshot": ("caller",),
    "transfer_ownership": ("caller", "new_owner"),
    "get_twap": (),
    "get_reserve_ratio": (),
    "get_equity": (),
    "get_phase": (),
    "get_twap_window": (),
}


def _effect_to_dict(effect: Effect) -> Dict[str, Any]:
    return {
        "event": effect.event.value,
        "twap_e8": effect.twap_e8,
        "gross": effect.gross,
        "fee": effect.fee,
        "net": effect.net,
        "ratio_after_e8": effect.ratio_after_e8,
        "transfers": [
            {"kind": t.kind.value, "account": t.account, "amount": t.amount}
            for t in effect.transfers
        ],
    }


def _run_step(dep: InMemoryDeployment, step: Mapping[str, Any]) -> Any:
    op = step.get("op")
    if op == "accrue":
        dep.pools.resolve(str(step["pool"])).accrue(int(step["price_e8"]), int(step["blocks"]))
        return dep.clock.advance(int(step["blocks"]))
    if op == "advance_blocks":
        return dep.clock.advance(int(step["blocks"]))

    arg_names = _ENGINE_OPS.get(str(op))
    if arg_names is None:
        raise ScenarioError(f"unknown op: {op!r}")
    unknown = sorted(set(step) - {"op", *arg_names})
    if unknown:
        raise ScenarioError(f"{op}: unknown keys {unknown}")
    try:
        args = [step[name] for name in arg_names]
    except KeyError as exc:
        raise ScenarioError(f"{op}: missing key {exc.args[0]!r}") from None

    out = getattr(dep.engine, str(op))(*args)
    if isinstance(out, Effect):
        return _effect_to_dict(out)
    if op == "get_phase":
        return out.name
    return out


def run_scenario(scenario: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(scenario, Mapping):
        raise ScenarioError("scenario must be a mapping")
    dep = deploy_in_memory(config_from_mapping(scenario.get("config") or {}))

    for pool_ref, assets in (scenario.get("pools") or {}).items():
        dep.pools.register(str(pool_ref), CumulativePricePool(
            first_asset=str(assets["first_asset"]),
            second_asset=str(assets["second_asset"]),
        ))
    for account, amount in (scenario.get("funds") or {}).items():
        dep.custodian.deposit(str(account), int(amount))

    results: List[Dict[str, Any]] = []
    for index, step in enumerate(scenario.get("steps") or []):
        if not isinstance(step, Mapping):
            raise ScenarioError(f"step {index} must be a mapping")
        entry: Dict[str, Any] = {"index": index, "op": step.get("op")}
        try:
            entry["ok"] = True
            entry["result"] = _run_step(dep, step)
        except ReserveError as exc:
            entry["ok"] = False
            entry["error_kind"] = type(exc).__name__
            entry["error"] = str(exc)
        results.append(entry)

    state = dep.engine.state
    balances = [
        {"account": account, "asset": asset, "amount": amount}
        for (account, asset), amount in sorted(dep.balances.get_all_balances().items())
    ]
    return {
        "steps": results,
        "state": state_to_dict(state),
        "commitment": state_commitment_hex(state),
        "balances": balances,
        "supplies": {
            "stable": dep.stable.total_supply(),
            "reserve": dep.reserve.total_supply(),
        },
    }


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Run a reserve scenario (YAML) and print JSON results.")
    p.add_argument("scenario", type=Path, help="Path to scenario YAML")
    p.add_argument("--log-level", default="WARNING", help="Python logging level (default: WARNING)")
    args = p.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        scenario = yaml.safe_load(args.scenario.read_text(encoding="utf-8"))
        report = run_scenario(scenario)
    except (OSError, yaml.YAMLError, ScenarioError, ValueError, TypeError, KeyError) as exc:
        print(f"reserve_scenario error: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(report, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
