"""Randomized greedy construction of fixed-size bundles from ranked picks."""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from prop_parlay.bundles import Bundle, BundleSignature, bundle_signature, make_bundle
from prop_parlay.candidates import CandidatePick
from prop_parlay.correlation import is_correlated
from prop_parlay.errors import ConfigError
from prop_parlay.exposure import (
    DEFAULT_EXPOSURE_CAP,
    DEFAULT_REUSE_CAP,
    ExposureKey,
    ExposureTracker,
)

logger = logging.getLogger(__name__)

LEG_REASON_CORRELATED = "correlated_player"
LEG_REASON_STAT_USED = "stat_used"
LEG_REASON_TEAM_USED = "team_used"


class BuildState(str, Enum):
    ATTEMPTING = "attempting"
    COMMITTED = "committed"
    DISCARDED = "discarded"
    DONE = "done"


class AttemptOutcome(str, Enum):
    COMMITTED = "committed"
    INCOMPLETE = "incomplete"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class BuildConfig:
    """Knobs for one bundle-building run."""

    target_bundles: int = 8
    legs_per_bundle: int = 3
    exposure_cap: int = DEFAULT_EXPOSURE_CAP
    reuse_cap: int = DEFAULT_REUSE_CAP
    attempt_multiplier: int = 3
    perturb_window: int = 10
    strict_same_player: bool = True

    def __post_init__(self) -> None:
        for name in (
            "target_bundles",
            "legs_per_bundle",
            "exposure_cap",
            "reuse_cap",
            "attempt_multiplier",
            "perturb_window",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

    @property
    def attempt_budget(self) -> int:
        return self.target_bundles * self.attempt_multiplier


@dataclass
class BuildResult:
    bundles: list[Bundle]
    attempts_used: int
    attempt_budget: int
    outcomes: Counter[str] = field(default_factory=Counter)
    exposure: dict[ExposureKey, int] = field(default_factory=dict)

    @property
    def exhausted(self) -> bool:
        return self.attempts_used >= self.attempt_budget

    @property
    def committed(self) -> int:
        return len(self.bundles)


class BundleBuilder:
    """Assemble up to `target_bundles` distinct bundles from a ranked pool.

    Each attempt walks the pool from the top and keeps the first legs that
    pass the correlation, stat, team and exposure checks. Between attempts a
    candidate from the top of the pool is moved to the front so later
    attempts explore other combinations.
    """

    def __init__(
        self,
        config: BuildConfig | None = None,
        *,
        rng: random.Random | None = None,
        tracker: ExposureTracker | None = None,
    ) -> None:
        self.config = config or BuildConfig()
        self.rng = rng if rng is not None else random.Random()
        self.tracker = tracker if tracker is not None else ExposureTracker(
            exposure_cap=self.config.exposure_cap,
            reuse_cap=self.config.reuse_cap,
        )
        self.state = BuildState.DONE

    def leg_rejection(self, legs: Sequence[CandidatePick], pick: CandidatePick) -> str:
        """Return why `pick` cannot join `legs`, or "" when it can."""
        if is_correlated(
            legs,
            pick.player_key,
            pick.stat,
            strict_same_player=self.config.strict_same_player,
        ):
            return LEG_REASON_CORRELATED
        if any(leg.stat == pick.stat for leg in legs):
            return LEG_REASON_STAT_USED
        team = pick.normalized_team
        if team and any(leg.normalized_team == team for leg in legs):
            return LEG_REASON_TEAM_USED
        return self.tracker.blocked_reason(pick)

    def assemble(self, pool: Sequence[CandidatePick]) -> list[CandidatePick]:
        """Greedy single pass over `pool`; may return fewer than the target legs."""
        legs: list[CandidatePick] = []
        for pick in pool:
            if len(legs) >= self.config.legs_per_bundle:
                break
            if self.leg_rejection(legs, pick):
                continue
            legs.append(pick)
        return legs

    def perturb(self, pool: list[CandidatePick]) -> None:
        if not pool:
            return
        index = self.rng.randrange(min(len(pool), self.config.perturb_window))
        if index > 0:
            pool.insert(0, pool.pop(index))

    def build(self, ranked: Sequence[CandidatePick]) -> BuildResult:
        """Run attempts until the target is reached or the budget is spent."""
        config = self.config
        pool = list(ranked)
        bundles: list[Bundle] = []
        signatures: list[BundleSignature] = []
        outcomes: Counter[str] = Counter()
        attempts = 0

        if not pool:
            logger.info("empty candidate pool; nothing to build")
            return BuildResult(
                bundles=[],
                attempts_used=0,
                attempt_budget=config.attempt_budget,
                exposure=self.tracker.snapshot(),
            )

        while attempts < config.attempt_budget and len(bundles) < config.target_bundles:
            attempts += 1
            self.state = BuildState.ATTEMPTING
            legs = self.assemble(pool)

            if len(legs) < config.legs_per_bundle:
                outcome = AttemptOutcome.INCOMPLETE
            else:
                signature = bundle_signature(legs)
                if signature in signatures:
                    outcome = AttemptOutcome.DUPLICATE
                else:
                    outcome = AttemptOutcome.COMMITTED
                    signatures.append(signature)
                    bundles.append(make_bundle(len(bundles) + 1, legs))
                    self.tracker.commit(legs)

            outcomes[outcome.value] += 1
            self.state = (
                BuildState.COMMITTED
                if outcome is AttemptOutcome.COMMITTED
                else BuildState.DISCARDED
            )
            logger.debug(
                "attempt %d/%d %s: %s (%d legs, %d committed)",
                attempts,
                config.attempt_budget,
                self.state.value,
                outcome.value,
                len(legs),
                len(bundles),
            )

            if len(bundles) < config.target_bundles:
                self.perturb(pool)

        self.state = BuildState.DONE
        logger.info(
            "built %d/%d bundles in %d/%d attempts",
            len(bundles),
            config.target_bundles,
            attempts,
            config.attempt_budget,
        )
        return BuildResult(
            bundles=bundles,
            attempts_used=attempts,
            attempt_budget=config.attempt_budget,
            outcomes=outcomes,
            exposure=self.tracker.snapshot(),
        )


def build_bundles(
    ranked: Sequence[CandidatePick],
    config: BuildConfig | None = None,
    *,
    rng: random.Random | None = None,
) -> BuildResult:
    """Build bundles with a fresh exposure tracker."""
    return BundleBuilder(config, rng=rng).build(ranked)
