from __future__ import annotations

import pytest

from prop_parlay.prop_types import (
    COMBO_BASES,
    base_stats,
    is_composite,
    normalize_prop_type,
    strip_qualifier,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("player_points_rebounds_assists", "pra"),
        ("Player_Points_Rebounds_Assists", "pra"),
        ("pts_rebs_asts", "pra"),
        ("player_points_rebounds", "pr"),
        ("player_points_assists", "pa"),
        ("player_rebounds_assists", "ra"),
        ("player_threes", "threes"),
        ("player_three_pointers_made", "threes"),
        ("threes_made", "threes"),
        ("player_points", "points"),
        ("batter_hits", "hits"),
        ("pitcher_strikeouts", "strikeouts"),
        ("  player_assists  ", "assists"),
        ("", ""),
    ],
)
def test_normalize_prop_type(raw: str, expected: str) -> None:
    assert normalize_prop_type(raw) == expected


@pytest.mark.parametrize(
    "code",
    ["pra", "pr", "pa", "ra", "threes", "points", "rebounds", "assists", "hits"],
)
def test_normalize_prop_type_is_idempotent(code: str) -> None:
    assert normalize_prop_type(code) == code
    assert normalize_prop_type(normalize_prop_type(code)) == code


def test_strip_qualifier_only_removes_leading_prefix() -> None:
    assert strip_qualifier("player_points") == "points"
    assert strip_qualifier("total_player_points") == "total_player_points"


def test_base_stats_expands_composites() -> None:
    assert base_stats("pra") == ("points", "rebounds", "assists")
    assert base_stats("player_points_assists") == ("points", "assists")
    assert base_stats("points") == ("points",)
    assert base_stats("threes") == ("threes",)


def test_is_composite_matches_combo_table() -> None:
    assert all(is_composite(code) for code in COMBO_BASES)
    assert not is_composite("threes")
    assert not is_composite("points")
