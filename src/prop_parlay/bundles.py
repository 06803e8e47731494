"""Committed bundle model and its serialized row shape."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from prop_parlay.candidates import CandidatePick
from prop_parlay.odds_math import combined_probability, expected_odds, fair_american_price

BundleSignature = frozenset[tuple[str, str]]


def bundle_signature(legs: Sequence[CandidatePick]) -> BundleSignature:
    """Order-independent identity of a bundle: its set of (player, stat) pairs."""
    return frozenset(leg.exposure_key for leg in legs)


@dataclass(frozen=True)
class Bundle:
    index: int
    legs: tuple[CandidatePick, ...]
    avg_conviction: float
    confirmed_count: int
    combined_probability: float
    expected_odds: int
    expected_american: int | None
    rationale: str

    @property
    def leg_count(self) -> int:
        return len(self.legs)

    @property
    def signature(self) -> BundleSignature:
        return bundle_signature(self.legs)

    def to_row(self) -> dict[str, Any]:
        return {
            "bundle_index": self.index,
            "leg_count": self.leg_count,
            "legs": [leg.to_leg() for leg in self.legs],
            "avg_conviction": round(self.avg_conviction, 4),
            "confirmed_count": self.confirmed_count,
            "combined_probability": round(self.combined_probability, 6),
            "expected_odds": self.expected_odds,
            "expected_american": self.expected_american,
            "selection_rationale": self.rationale,
        }


def make_bundle(index: int, legs: Sequence[CandidatePick]) -> Bundle:
    """Price and describe a completed leg list."""
    if not legs:
        raise ValueError("bundle requires at least one leg")
    avg = sum(leg.conviction for leg in legs) / len(legs)
    confirmed = sum(1 for leg in legs if leg.confirmed)
    probability = combined_probability(leg.edge_pct for leg in legs)
    rationale = (
        f"Conviction bundle #{index}. Avg score: {avg:.1f}. "
        f"{confirmed}/{len(legs)} cross-confirmed."
    )
    return Bundle(
        index=index,
        legs=tuple(legs),
        avg_conviction=avg,
        confirmed_count=confirmed,
        combined_probability=probability,
        expected_odds=expected_odds(probability),
        expected_american=fair_american_price(probability),
        rationale=rationale,
    )
