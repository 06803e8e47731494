"""Candidate picks parsed from upstream mispriced-line rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from prop_parlay.errors import CandidateDataError
from prop_parlay.names import normalize_person_name, team_key
from prop_parlay.prop_types import normalize_prop_type
from prop_parlay.util.parsing import safe_float, safe_str

logger = logging.getLogger(__name__)

DEFAULT_BLOCKED_PROP_TYPES: tuple[str, ...] = ("player_steals", "player_blocks")

REJECT_MISSING_PLAYER = "missing_player"
REJECT_MISSING_PROP_TYPE = "missing_prop_type"
REJECT_INVALID_EDGE = "invalid_edge"
REJECT_UNKNOWN_TIER = "unknown_tier"
REJECT_INVALID_LINE = "invalid_line"
REJECT_MISSING_SIDE = "missing_side"


class ConfidenceTier(str, Enum):
    ELITE = "ELITE"
    HIGH = "HIGH"

    @classmethod
    def parse(cls, value: Any) -> ConfidenceTier | None:
        raw = safe_str(value).upper()
        try:
            return cls(raw)
        except ValueError:
            return None


@dataclass(frozen=True)
class CandidatePick:
    """One gradeable opportunity.

    `conviction`, `confirmed` and `confirmation_side` are filled in once by the
    scorer; picks are never mutated after that.
    """

    player: str
    player_key: str
    stat: str
    market: str
    side: str
    edge_pct: float
    tier: ConfidenceTier
    line: float
    trailing_avg: float | None
    sport: str
    team: str = ""
    confirmed: bool = False
    confirmation_side: str = ""
    conviction: float = 0.0

    @property
    def exposure_key(self) -> tuple[str, str]:
        return (self.player_key, self.stat)

    @property
    def normalized_team(self) -> str:
        return team_key(self.team)

    def to_leg(self) -> dict[str, Any]:
        return {
            "player_name": self.player,
            "prop_type": self.market,
            "stat": self.stat,
            "side": self.side,
            "line": self.line,
            "edge_pct": self.edge_pct,
            "confidence_tier": self.tier.value,
            "confirmed": self.confirmed,
            "player_avg": self.trailing_avg,
            "sport": self.sport,
            "team": self.team,
            "conviction_score": round(self.conviction, 4),
        }


@dataclass(frozen=True)
class CandidatePool:
    """Parsed candidates plus an account of every row that was dropped."""

    picks: list[CandidatePick]
    rejected: list[tuple[int, str]] = field(default_factory=list)
    blocked_count: int = 0
    rows_seen: int = 0


def parse_candidate_row(row: Mapping[str, Any], *, min_line: float | None = 0.0) -> CandidatePick:
    """Parse one mispriced-line row; raise CandidateDataError when it is unusable."""
    player = safe_str(row.get("player_name") or row.get("player"))
    player_key = normalize_person_name(player)
    if not player_key:
        raise CandidateDataError(REJECT_MISSING_PLAYER)

    market = safe_str(row.get("prop_type") or row.get("market"))
    stat = normalize_prop_type(market)
    if not stat:
        raise CandidateDataError(REJECT_MISSING_PROP_TYPE)

    edge = safe_float(row.get("edge_pct"))
    if edge is None:
        raise CandidateDataError(REJECT_INVALID_EDGE)

    tier = ConfidenceTier.parse(row.get("confidence_tier") or row.get("tier"))
    if tier is None:
        raise CandidateDataError(REJECT_UNKNOWN_TIER)

    line = safe_float(row.get("book_line", row.get("line")))
    if line is None or (min_line is not None and line <= min_line):
        raise CandidateDataError(REJECT_INVALID_LINE)

    side = safe_str(row.get("signal") or row.get("side")).lower()
    if not side:
        raise CandidateDataError(REJECT_MISSING_SIDE)

    return CandidatePick(
        player=player,
        player_key=player_key,
        stat=stat,
        market=market,
        side=side,
        edge_pct=edge,
        tier=tier,
        line=line,
        trailing_avg=safe_float(row.get("player_avg_l10", row.get("trailing_avg"))),
        sport=safe_str(row.get("sport")),
        team=safe_str(row.get("team") or row.get("team_name")),
    )


def is_blocked(market: str, blocked_prop_types: Iterable[str]) -> bool:
    """Exact, case-insensitive match of the raw market label against the blocklist."""
    label = market.strip().lower()
    return any(label == blocked.strip().lower() for blocked in blocked_prop_types)


def load_candidates(
    rows: Iterable[Mapping[str, Any]],
    *,
    blocked_prop_types: Iterable[str] = DEFAULT_BLOCKED_PROP_TYPES,
    min_line: float | None = 0.0,
) -> CandidatePool:
    """Parse upstream rows, excluding malformed or blocked ones instead of failing."""
    blocked = tuple(blocked_prop_types)
    picks: list[CandidatePick] = []
    rejected: list[tuple[int, str]] = []
    blocked_count = 0
    rows_seen = 0
    for index, row in enumerate(rows):
        rows_seen += 1
        if not isinstance(row, Mapping):
            rejected.append((index, "not_an_object"))
            continue
        if is_blocked(safe_str(row.get("prop_type") or row.get("market")), blocked):
            blocked_count += 1
            continue
        try:
            picks.append(parse_candidate_row(row, min_line=min_line))
        except CandidateDataError as exc:
            rejected.append((index, str(exc)))

    if rejected:
        logger.warning("excluded %d malformed candidate rows of %d", len(rejected), rows_seen)
    if blocked_count:
        logger.info("filtered %d candidates with blocked prop types", blocked_count)
    return CandidatePool(
        picks=picks,
        rejected=rejected,
        blocked_count=blocked_count,
        rows_seen=rows_seen,
    )
