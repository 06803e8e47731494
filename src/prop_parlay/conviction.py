"""Conviction scoring and ranking for candidate picks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

from prop_parlay.candidates import CandidatePick, ConfidenceTier
from prop_parlay.signals import ConfirmationSignal, PerformanceRecord, SignalKey

MAX_CONVICTION = 100.0
EDGE_WEIGHT = 0.3

TIER_BONUS: dict[ConfidenceTier, float] = {
    ConfidenceTier.ELITE: 20.0,
    ConfidenceTier.HIGH: 10.0,
}
CONFIRMED_SAME_SIDE_BONUS = 25.0
CONFIRMED_OPPOSITE_SIDE_BONUS = 5.0
UNDER_SIDE_BONUS = 10.0

HISTORY_MIN_LEGS = 5
HISTORY_STRONG_HIT_RATE = 0.70
HISTORY_STRONG_BONUS = 15.0
HISTORY_SOLID_HIT_RATE = 0.50
HISTORY_SOLID_BONUS = 5.0
HISTORY_POOR_HIT_RATE = 0.30
HISTORY_POOR_PENALTY = -20.0


@dataclass(frozen=True)
class ScoreBreakdown:
    edge: float
    tier: float
    confirmation: float
    side: float
    history: float

    @property
    def total(self) -> float:
        raw = self.edge + self.tier + self.confirmation + self.side + self.history
        return min(MAX_CONVICTION, raw)


def confirmation_bonus(side: str, confirmation: ConfirmationSignal | None) -> float:
    if confirmation is None:
        return 0.0
    if confirmation.side.lower() == side.lower():
        return CONFIRMED_SAME_SIDE_BONUS
    return CONFIRMED_OPPOSITE_SIDE_BONUS


def history_bonus(record: PerformanceRecord | None) -> float:
    if record is None or record.legs_played < HISTORY_MIN_LEGS:
        return 0.0
    if record.hit_rate >= HISTORY_STRONG_HIT_RATE:
        return HISTORY_STRONG_BONUS
    if record.hit_rate >= HISTORY_SOLID_HIT_RATE:
        return HISTORY_SOLID_BONUS
    if record.hit_rate < HISTORY_POOR_HIT_RATE:
        return HISTORY_POOR_PENALTY
    return 0.0


def conviction_breakdown(
    pick: CandidatePick,
    *,
    confirmation: ConfirmationSignal | None = None,
    performance: PerformanceRecord | None = None,
) -> ScoreBreakdown:
    # Signed edge on purpose: a negative edge lowers the score.
    return ScoreBreakdown(
        edge=pick.edge_pct * EDGE_WEIGHT,
        tier=TIER_BONUS[pick.tier],
        confirmation=confirmation_bonus(pick.side, confirmation),
        side=UNDER_SIDE_BONUS if pick.side.lower() == "under" else 0.0,
        history=history_bonus(performance),
    )


def score_candidate(
    pick: CandidatePick,
    *,
    confirmations: Mapping[SignalKey, ConfirmationSignal] | None = None,
    performance: Mapping[SignalKey, PerformanceRecord] | None = None,
) -> CandidatePick:
    """Return a scored copy of `pick` with confirmation fields populated."""
    confirmation = (confirmations or {}).get(pick.exposure_key)
    record = (performance or {}).get(pick.exposure_key)
    breakdown = conviction_breakdown(pick, confirmation=confirmation, performance=record)
    confirmed = confirmation is not None and confirmation.side.lower() == pick.side.lower()
    team = pick.team or (confirmation.team if confirmation is not None else "")
    return replace(
        pick,
        team=team,
        confirmed=confirmed,
        confirmation_side=confirmation.side if confirmation is not None else "",
        conviction=breakdown.total,
    )


def rank_candidates(
    picks: Iterable[CandidatePick],
    *,
    confirmations: Mapping[SignalKey, ConfirmationSignal] | None = None,
    performance: Mapping[SignalKey, PerformanceRecord] | None = None,
) -> list[CandidatePick]:
    """Score every pick and order by conviction, highest first.

    `sorted` is stable, so equal scores keep arrival order.
    """
    scored = [
        score_candidate(pick, confirmations=confirmations, performance=performance)
        for pick in picks
    ]
    return sorted(scored, key=lambda pick: -pick.conviction)
