"""Same-player correlation checks for bundle legs."""

from __future__ import annotations

from collections.abc import Iterable

from prop_parlay.candidates import CandidatePick
from prop_parlay.prop_types import base_stats, is_composite, normalize_prop_type


def composite_overlap(stat_a: str, stat_b: str) -> bool:
    """True when two stat codes move together for the same player.

    Identical codes overlap, as do two composites, or a composite and one of
    its base stats.
    """
    a = normalize_prop_type(stat_a)
    b = normalize_prop_type(stat_b)
    if a == b:
        return True
    if is_composite(a) and is_composite(b):
        return True
    return bool(set(base_stats(a)) & set(base_stats(b)))


def is_correlated(
    existing_legs: Iterable[CandidatePick],
    player_key: str,
    stat: str,
    *,
    strict_same_player: bool = True,
) -> bool:
    """Return True when the candidate may not join a bundle holding `existing_legs`.

    Legs are matched on `player_key` as stored on the pick; display names are
    never compared. With `strict_same_player` any second leg on the same
    player is rejected. Otherwise only composite/base overlaps with that
    player's legs are.
    """
    prop = normalize_prop_type(stat)
    player_stats = [leg.stat for leg in existing_legs if leg.player_key == player_key]
    if not player_stats:
        return False
    if strict_same_player:
        return True
    return any(composite_overlap(prop, existing) for existing in player_stats)
