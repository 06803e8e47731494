"""Independent-confirmation and trailing-performance lookups."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from prop_parlay.names import normalize_person_name
from prop_parlay.prop_types import normalize_prop_type
from prop_parlay.util.parsing import safe_float, safe_int, safe_str

SignalKey = tuple[str, str]


@dataclass(frozen=True)
class ConfirmationSignal:
    """Side recommended by an independent engine for one (player, stat)."""

    side: str
    confidence: float | None = None
    team: str = ""


@dataclass(frozen=True)
class PerformanceRecord:
    """Trailing settled-leg record for one (player, stat)."""

    legs_played: int
    legs_won: int
    hit_rate: float


def signal_key(player: str, prop_type: str) -> SignalKey:
    return (normalize_person_name(player), normalize_prop_type(prop_type))


def _row_key(row: Mapping[str, Any]) -> SignalKey | None:
    player = safe_str(row.get("player_name") or row.get("player"))
    prop_type = safe_str(row.get("prop_type") or row.get("market"))
    key = signal_key(player, prop_type)
    if not key[0] or not key[1]:
        return None
    return key


def build_confirmation_lookup(
    rows: Iterable[Mapping[str, Any]],
) -> dict[SignalKey, ConfirmationSignal]:
    """Index confirmation rows by (player, stat); later rows replace earlier ones."""
    lookup: dict[SignalKey, ConfirmationSignal] = {}
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        key = _row_key(row)
        if key is None:
            continue
        side = safe_str(row.get("side")).lower() or "over"
        lookup[key] = ConfirmationSignal(
            side=side,
            confidence=safe_float(row.get("confidence_score", row.get("confidence"))),
            team=safe_str(row.get("team_name") or row.get("team")),
        )
    return lookup


def build_performance_lookup(
    rows: Iterable[Mapping[str, Any]],
) -> dict[SignalKey, PerformanceRecord]:
    lookup: dict[SignalKey, PerformanceRecord] = {}
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        key = _row_key(row)
        if key is None:
            continue
        played = safe_int(row.get("legs_played"))
        won = safe_int(row.get("legs_won"))
        if played is None or played <= 0:
            continue
        won = max(0, min(won or 0, played))
        hit_rate = safe_float(row.get("hit_rate"))
        if hit_rate is None:
            hit_rate = won / played
        elif hit_rate > 1.0:
            # Some feeds publish percentages.
            hit_rate = hit_rate / 100.0
        lookup[key] = PerformanceRecord(legs_played=played, legs_won=won, hit_rate=hit_rate)
    return lookup
