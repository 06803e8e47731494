"""Per-run exposure bookkeeping for (player, stat) pairs."""

from __future__ import annotations

from collections.abc import Iterable

from prop_parlay.candidates import CandidatePick
from prop_parlay.errors import ConfigError

DEFAULT_EXPOSURE_CAP = 5
DEFAULT_REUSE_CAP = 2

EXPOSURE_REASON_GLOBAL_CAP = "exposure_cap_global"
EXPOSURE_REASON_REUSE_CAP = "exposure_cap_reuse"

ExposureKey = tuple[str, str]


class ExposureTracker:
    """Counts how many committed bundles hold each (player, stat) pair.

    One tracker belongs to one run. Counts only grow, and only on commit.
    """

    def __init__(
        self,
        *,
        exposure_cap: int = DEFAULT_EXPOSURE_CAP,
        reuse_cap: int = DEFAULT_REUSE_CAP,
    ) -> None:
        if exposure_cap < 1:
            raise ConfigError(f"exposure_cap must be >= 1, got {exposure_cap}")
        if reuse_cap < 1:
            raise ConfigError(f"reuse_cap must be >= 1, got {reuse_cap}")
        self.exposure_cap = exposure_cap
        self.reuse_cap = reuse_cap
        self._counts: dict[ExposureKey, int] = {}

    def count(self, key: ExposureKey) -> int:
        return self._counts.get(key, 0)

    def blocked_reason(self, pick: CandidatePick) -> str:
        """Return the cap that blocks `pick`, or "" when it may be used."""
        used = self.count(pick.exposure_key)
        if used >= self.exposure_cap:
            return EXPOSURE_REASON_GLOBAL_CAP
        if used >= self.reuse_cap:
            return EXPOSURE_REASON_REUSE_CAP
        return ""

    def commit(self, legs: Iterable[CandidatePick]) -> None:
        for leg in legs:
            key = leg.exposure_key
            self._counts[key] = self._counts.get(key, 0) + 1

    def snapshot(self) -> dict[ExposureKey, int]:
        return dict(self._counts)
