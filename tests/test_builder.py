from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import replace

import pytest
from picks import make_pick

from prop_parlay.builder import (
    LEG_REASON_CORRELATED,
    LEG_REASON_STAT_USED,
    LEG_REASON_TEAM_USED,
    AttemptOutcome,
    BuildConfig,
    BuildState,
    BundleBuilder,
    build_bundles,
)
from prop_parlay.candidates import CandidatePick
from prop_parlay.conviction import rank_candidates
from prop_parlay.errors import ConfigError
from prop_parlay.exposure import EXPOSURE_REASON_REUSE_CAP, ExposureTracker

STATS = ("player_points", "player_rebounds", "player_assists", "player_threes")
TEAMS = ("BOS", "LAL", "NYK", "DEN", "MIA", "PHX")


class _FixedRng:
    """Stands in for random.Random and records the ranges it was asked for."""

    def __init__(self, value: int) -> None:
        self.value = value
        self.calls: list[int] = []

    def randrange(self, stop: int) -> int:
        self.calls.append(stop)
        return min(self.value, stop - 1)


def _slate(players: int = 12) -> list[CandidatePick]:
    picks = []
    for index in range(players):
        for offset, market in enumerate(STATS):
            picks.append(
                make_pick(
                    f"Player {chr(ord('A') + index)}",
                    market,
                    edge_pct=20.0 + ((index * 7 + offset * 13) % 60),
                    side="under" if (index + offset) % 3 == 0 else "over",
                    team=TEAMS[index % len(TEAMS)],
                )
            )
    return rank_candidates(picks)


def _assert_bundle_invariants(bundles: list, config: BuildConfig) -> None:
    assert len(bundles) <= config.target_bundles
    signatures = set()
    exposure: Counter[tuple[str, str]] = Counter()
    for bundle in bundles:
        legs = bundle.legs
        assert len(legs) == config.legs_per_bundle
        assert len({leg.player_key for leg in legs}) == len(legs)
        assert len({leg.stat for leg in legs}) == len(legs)
        teams = [leg.normalized_team for leg in legs if leg.normalized_team]
        assert len(set(teams)) == len(teams)
        assert bundle.signature not in signatures
        signatures.add(bundle.signature)
        exposure.update(leg.exposure_key for leg in legs)
    cap = min(config.exposure_cap, config.reuse_cap)
    assert all(count <= cap for count in exposure.values())


def test_build_respects_all_bundle_invariants() -> None:
    config = BuildConfig()
    result = build_bundles(_slate(), config, rng=random.Random(7))

    assert 0 < result.committed <= config.target_bundles
    assert result.attempts_used <= config.attempt_budget
    _assert_bundle_invariants(result.bundles, config)
    assert [bundle.index for bundle in result.bundles] == list(
        range(1, result.committed + 1)
    )


def test_build_is_reproducible_with_same_seed() -> None:
    slate = _slate()
    first = build_bundles(slate, rng=random.Random(42))
    second = build_bundles(slate, rng=random.Random(42))

    assert [b.signature for b in first.bundles] == [b.signature for b in second.bundles]
    assert first.attempts_used == second.attempts_used


def test_single_player_pool_yields_no_bundles() -> None:
    ranked = rank_candidates(
        [make_pick("Player X", "player_points"), make_pick("Player X", "player_rebounds")]
    )

    result = build_bundles(ranked, rng=random.Random(1))

    assert result.bundles == []
    assert result.exhausted
    assert result.outcomes[AttemptOutcome.INCOMPLETE.value] == result.attempts_used


def test_three_players_three_stats_build_one_leg_per_player() -> None:
    picks = [
        make_pick(player, market)
        for player in ("Player A", "Player B", "Player C")
        for market in ("player_points", "player_rebounds", "player_assists")
    ]

    result = build_bundles(rank_candidates(picks), rng=random.Random(3))

    assert result.committed >= 1
    for bundle in result.bundles:
        assert {leg.player for leg in bundle.legs} == {"Player A", "Player B", "Player C"}
        assert len({leg.stat for leg in bundle.legs}) == 3


def test_exposure_cap_of_one_never_reuses_a_pair() -> None:
    config = BuildConfig(exposure_cap=1)
    result = build_bundles(_slate(), config, rng=random.Random(11))

    used = Counter(leg.exposure_key for bundle in result.bundles for leg in bundle.legs)
    assert result.committed > 0
    assert max(used.values()) == 1


def test_identical_leg_set_is_discarded_as_duplicate() -> None:
    picks = [
        make_pick("Player A", "player_points"),
        make_pick("Player B", "player_rebounds"),
        make_pick("Player C", "player_assists"),
    ]

    result = build_bundles(rank_candidates(picks), rng=random.Random(5))

    assert result.committed == 1
    assert result.attempts_used == result.attempt_budget == 24
    assert result.exhausted
    assert result.outcomes[AttemptOutcome.DUPLICATE.value] == 23


def test_same_team_legs_are_not_combined() -> None:
    picks = [
        make_pick("Player A", "player_points", team="BOS", conviction=90.0),
        make_pick("Player B", "player_rebounds", team="Boston Celtics", conviction=80.0),
        make_pick("Player C", "player_assists", team="LAL", conviction=70.0),
        make_pick("Player D", "player_threes", team="NYK", conviction=60.0),
    ]
    builder = BundleBuilder(BuildConfig(target_bundles=1))

    assert builder.leg_rejection(picks[:1], picks[1]) == LEG_REASON_TEAM_USED
    legs = builder.assemble(picks)
    assert [leg.player for leg in legs] == ["Player A", "Player C", "Player D"]


def test_leg_rejection_reasons() -> None:
    builder = BundleBuilder(BuildConfig(reuse_cap=1))
    legs = [make_pick("Player A", "player_points")]

    assert builder.leg_rejection(legs, make_pick("Player A", "player_assists")) == (
        LEG_REASON_CORRELATED
    )
    assert builder.leg_rejection(legs, make_pick("Player B", "player_points")) == (
        LEG_REASON_STAT_USED
    )
    builder.tracker.commit([make_pick("Player B", "player_rebounds")])
    assert builder.leg_rejection(legs, make_pick("Player B", "player_rebounds")) == (
        EXPOSURE_REASON_REUSE_CAP
    )
    assert builder.leg_rejection(legs, make_pick("Player C", "player_rebounds")) == ""


def test_relaxed_same_player_mode_allows_unrelated_stats() -> None:
    builder = BundleBuilder(BuildConfig(strict_same_player=False))
    legs = [make_pick("Player A", "player_points")]

    assert builder.leg_rejection(legs, make_pick("Player A", "player_threes")) == ""
    assert builder.leg_rejection(legs, make_pick("Player A", "player_points_assists")) == (
        LEG_REASON_CORRELATED
    )


def test_perturb_moves_sampled_pick_to_front_within_window() -> None:
    rng = _FixedRng(3)
    builder = BundleBuilder(BuildConfig(perturb_window=4), rng=rng)  # type: ignore[arg-type]
    pool = [make_pick(f"Player {name}") for name in "ABCDEF"]

    builder.perturb(pool)

    assert rng.calls == [4]
    assert [pick.player for pick in pool] == [
        "Player D",
        "Player A",
        "Player B",
        "Player C",
        "Player E",
        "Player F",
    ]


def test_perturb_index_zero_leaves_order_and_small_pool_bounds_window() -> None:
    rng = _FixedRng(0)
    builder = BundleBuilder(BuildConfig(), rng=rng)  # type: ignore[arg-type]
    pool = [make_pick("Player A"), make_pick("Player B")]

    builder.perturb(pool)

    assert rng.calls == [2]
    assert [pick.player for pick in pool] == ["Player A", "Player B"]


def test_empty_pool_returns_without_attempts() -> None:
    result = build_bundles([], rng=random.Random(0))

    assert result.bundles == []
    assert result.attempts_used == 0
    assert not result.exhausted


def test_build_does_not_mutate_ranked_input() -> None:
    slate = _slate(6)
    before = list(slate)

    build_bundles(slate, rng=random.Random(9))

    assert slate == before


@pytest.mark.parametrize(
    "overrides",
    [
        {"target_bundles": 0},
        {"legs_per_bundle": 0},
        {"exposure_cap": -1},
        {"attempt_multiplier": 0},
        {"perturb_window": 0},
    ],
)
def test_build_config_rejects_non_positive_values(overrides: dict[str, int]) -> None:
    with pytest.raises(ConfigError):
        BuildConfig(**overrides)


def test_injected_tracker_is_used_and_enforces_its_caps() -> None:
    tracker = ExposureTracker(exposure_cap=1, reuse_cap=1)
    builder = BundleBuilder(BuildConfig(), rng=random.Random(11), tracker=tracker)

    result = builder.build(_slate())

    assert builder.tracker is tracker
    assert result.committed > 0
    used = Counter(leg.exposure_key for bundle in result.bundles for leg in bundle.legs)
    assert max(used.values()) == 1
    assert tracker.snapshot() == dict(used)
    assert result.exposure == dict(used)


def test_legs_sharing_a_player_key_never_share_a_bundle() -> None:
    picks = [
        replace(make_pick("LeBron James", "player_points", conviction=90.0), player_key="p23"),
        replace(make_pick("L. James", "player_rebounds", conviction=80.0), player_key="p23"),
        make_pick("Player B", "player_assists", conviction=70.0),
        make_pick("Player C", "player_threes", conviction=60.0),
    ]
    builder = BundleBuilder(BuildConfig(target_bundles=2))

    assert builder.leg_rejection(picks[:1], picks[1]) == LEG_REASON_CORRELATED
    result = builder.build(picks)
    for bundle in result.bundles:
        assert len({leg.player_key for leg in bundle.legs}) == len(bundle.legs)


def test_attempt_states_are_logged_and_builder_ends_done(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.DEBUG, logger="prop_parlay.builder")
    picks = [
        make_pick("Player A", "player_points"),
        make_pick("Player B", "player_rebounds"),
        make_pick("Player C", "player_assists"),
    ]
    builder = BundleBuilder(rng=random.Random(5))

    result = builder.build(rank_candidates(picks))

    assert builder.state is BuildState.DONE
    messages = [record.getMessage() for record in caplog.records]
    assert "attempt 1/24 committed: committed (3 legs, 1 committed)" in messages
    assert "attempt 2/24 discarded: duplicate (3 legs, 1 committed)" in messages
    assert result.exposure == {
        ("playera", "points"): 1,
        ("playerb", "rebounds"): 1,
        ("playerc", "assists"): 1,
    }
