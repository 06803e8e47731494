"""One end-to-end bundle run: parse, score, rank, build, summarize."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from prop_parlay.builder import BuildConfig, BundleBuilder
from prop_parlay.bundles import Bundle
from prop_parlay.candidates import DEFAULT_BLOCKED_PROP_TYPES, load_candidates
from prop_parlay.conviction import rank_candidates
from prop_parlay.signals import build_confirmation_lookup, build_performance_lookup
from prop_parlay.time_utils import et_today

logger = logging.getLogger(__name__)

STATUS_BUILT = "built"
STATUS_EMPTY_POOL = "empty_pool"
STATUS_NO_FEASIBLE = "no_feasible_bundles"

DEFAULT_STRATEGY_NAME = "conviction_bundles"
DEFAULT_SIMULATED_STAKE = 10.0


@dataclass(frozen=True)
class RunOptions:
    strategy_name: str = DEFAULT_STRATEGY_NAME
    blocked_prop_types: tuple[str, ...] = DEFAULT_BLOCKED_PROP_TYPES
    min_line: float | None = 0.0
    simulated_stake: float = DEFAULT_SIMULATED_STAKE


@dataclass
class RunSummary:
    run_date: date
    strategy_name: str
    status: str
    bundles: list[Bundle]
    candidates_considered: int
    target_bundles: int
    attempts_used: int = 0
    attempt_budget: int = 0
    candidates_rejected: list[tuple[int, str]] = field(default_factory=list)
    blocked_count: int = 0
    simulated_stake: float = DEFAULT_SIMULATED_STAKE
    outcomes: dict[str, int] = field(default_factory=dict)

    @property
    def feasible(self) -> bool:
        return self.status == STATUS_BUILT

    @property
    def message(self) -> str:
        if self.status == STATUS_EMPTY_POOL:
            return "no candidates available; nothing to build"
        if self.status == STATUS_NO_FEASIBLE:
            return (
                f"no feasible bundles from {self.candidates_considered} candidates "
                f"after {self.attempts_used} attempts"
            )
        return (
            f"built {len(self.bundles)}/{self.target_bundles} bundles "
            f"from {self.candidates_considered} candidates"
        )

    def bundle_rows(self) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        for bundle in self.bundles:
            row = bundle.to_row()
            row.update(
                {
                    "parlay_date": self.run_date.isoformat(),
                    "strategy_name": self.strategy_name,
                    "tier": "execution",
                    "is_simulated": True,
                    "simulated_stake": self.simulated_stake,
                }
            )
            rows.append(row)
        return rows

    def to_payload(self) -> dict[str, Any]:
        return {
            "run_date": self.run_date.isoformat(),
            "strategy_name": self.strategy_name,
            "status": self.status,
            "feasible": self.feasible,
            "message": self.message,
            "bundles_built": len(self.bundles),
            "target_bundles": self.target_bundles,
            "candidates_considered": self.candidates_considered,
            "candidates_rejected": [
                {"row_index": index, "reason": reason}
                for index, reason in self.candidates_rejected
            ],
            "blocked_count": self.blocked_count,
            "attempts_used": self.attempts_used,
            "attempt_budget": self.attempt_budget,
            "attempt_outcomes": dict(sorted(self.outcomes.items())),
            "bundles": self.bundle_rows(),
        }


def run_engine(
    rows: Iterable[Mapping[str, Any]],
    *,
    confirmation_rows: Iterable[Mapping[str, Any]] = (),
    performance_rows: Iterable[Mapping[str, Any]] = (),
    config: BuildConfig | None = None,
    options: RunOptions | None = None,
    rng: random.Random | None = None,
    run_date: date | None = None,
) -> RunSummary:
    """Build conviction bundles for one slate.

    Never raises for empty or partially bad input: the outcome is carried by
    `RunSummary.status`.
    """
    build_config = config or BuildConfig()
    run_options = options or RunOptions()
    slate_date = run_date or et_today()

    pool = load_candidates(
        rows,
        blocked_prop_types=run_options.blocked_prop_types,
        min_line=run_options.min_line,
    )
    confirmations = build_confirmation_lookup(confirmation_rows)
    performance = build_performance_lookup(performance_rows)
    ranked = rank_candidates(pool.picks, confirmations=confirmations, performance=performance)
    logger.info(
        "scored %d candidates (%d rejected, %d blocked); top score %s",
        len(ranked),
        len(pool.rejected),
        pool.blocked_count,
        f"{ranked[0].conviction:.1f}" if ranked else "n/a",
    )

    summary = RunSummary(
        run_date=slate_date,
        strategy_name=run_options.strategy_name,
        status=STATUS_EMPTY_POOL,
        bundles=[],
        candidates_considered=len(ranked),
        target_bundles=build_config.target_bundles,
        attempt_budget=build_config.attempt_budget,
        candidates_rejected=list(pool.rejected),
        blocked_count=pool.blocked_count,
        simulated_stake=run_options.simulated_stake,
    )
    if not ranked:
        logger.warning("no candidates available for %s", slate_date.isoformat())
        return summary

    result = BundleBuilder(build_config, rng=rng).build(ranked)
    summary.bundles = result.bundles
    summary.attempts_used = result.attempts_used
    summary.outcomes = dict(result.outcomes)
    summary.status = STATUS_BUILT if result.bundles else STATUS_NO_FEASIBLE
    if not result.bundles:
        logger.warning("%s", summary.message)
    return summary
