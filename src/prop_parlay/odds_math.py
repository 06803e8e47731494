"""Shared odds conversion and bundle pricing helpers."""

from __future__ import annotations

from collections.abc import Iterable

BASE_LEG_PROBABILITY = 0.55
EDGE_TO_PROBABILITY_DIVISOR = 500.0
MAX_LEG_PROBABILITY = 0.85
FALLBACK_EXPECTED_ODDS = 300


def american_to_decimal(price: int | None) -> float | None:
    """Convert American odds to decimal odds."""
    if price is None:
        return None
    if price > 0:
        return 1.0 + (price / 100.0)
    if price < 0:
        return 1.0 + (100.0 / abs(price))
    return None


def decimal_to_american(decimal_odds: float | None) -> int | None:
    """Convert decimal odds to American odds."""
    if decimal_odds is None or decimal_odds <= 1.0:
        return None
    if decimal_odds >= 2.0:
        return int(round((decimal_odds - 1.0) * 100.0))
    return int(round(-100.0 / (decimal_odds - 1.0)))


def leg_win_probability(edge_pct: float) -> float:
    """Estimate one leg's win probability from its edge magnitude."""
    raw = BASE_LEG_PROBABILITY + (abs(edge_pct) / EDGE_TO_PROBABILITY_DIVISOR)
    return min(raw, MAX_LEG_PROBABILITY)


def combined_probability(edges: Iterable[float]) -> float:
    """Joint hit probability of independent legs."""
    probability = 1.0
    for edge in edges:
        probability *= leg_win_probability(edge)
    return probability


def expected_odds(probability: float) -> int:
    """Fair payout per 100 staked, as published on bundle rows."""
    if probability <= 0:
        return FALLBACK_EXPECTED_ODDS
    return int(round(100.0 / probability))


def fair_american_price(probability: float) -> int | None:
    if probability <= 0 or probability >= 1:
        return None
    return decimal_to_american(1.0 / probability)
