"""Canonical stat codes for raw prop market labels."""

from __future__ import annotations

import re

_QUALIFIER_PREFIX_RE = re.compile(r"^(player_|batter_|pitcher_)")

# Order matters: the three-stat composite must be tried before its pairs.
_COMPOSITE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("pra", re.compile(r"points.*rebounds.*assists|pts.*rebs.*asts|^pra$")),
    ("pr", re.compile(r"points.*rebounds|pts.*rebs|^pr$")),
    ("pa", re.compile(r"points.*assists|pts.*asts|^pa$")),
    ("ra", re.compile(r"rebounds.*assists|rebs.*asts|^ra$")),
    ("threes", re.compile(r"three_pointers|threes_made|^threes$")),
)

COMBO_BASES: dict[str, tuple[str, ...]] = {
    "pra": ("points", "rebounds", "assists"),
    "pr": ("points", "rebounds"),
    "pa": ("points", "assists"),
    "ra": ("rebounds", "assists"),
}


def strip_qualifier(raw: str) -> str:
    """Drop the player/batter/pitcher market prefix and lowercase."""
    return _QUALIFIER_PREFIX_RE.sub("", raw.strip().lower()).strip()


def normalize_prop_type(raw: str) -> str:
    """Map a raw market label such as `player_points_rebounds_assists` to `pra`.

    Labels that match no composite pattern pass through (prefix stripped,
    lowercased). Already-canonical codes map to themselves.
    """
    label = strip_qualifier(raw or "")
    for code, pattern in _COMPOSITE_PATTERNS:
        if pattern.search(label):
            return code
    return label


def is_composite(code: str) -> bool:
    return code in COMBO_BASES


def base_stats(code: str) -> tuple[str, ...]:
    """Expand a composite code into its base stats; base codes expand to themselves."""
    canonical = normalize_prop_type(code)
    return COMBO_BASES.get(canonical, (canonical,))
