"""Flattened per-leg exports of committed bundles."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl

from prop_parlay.engine import RunSummary

_LEG_TABLE_SCHEMA: list[tuple[str, Any]] = [
    ("run_date", pl.Utf8),
    ("strategy_name", pl.Utf8),
    ("bundle_index", pl.Int64),
    ("leg_index", pl.Int64),
    ("player_name", pl.Utf8),
    ("prop_type", pl.Utf8),
    ("stat", pl.Utf8),
    ("side", pl.Utf8),
    ("line", pl.Float64),
    ("edge_pct", pl.Float64),
    ("confidence_tier", pl.Utf8),
    ("confirmed", pl.Boolean),
    ("player_avg", pl.Float64),
    ("sport", pl.Utf8),
    ("team", pl.Utf8),
    ("conviction_score", pl.Float64),
    ("bundle_avg_conviction", pl.Float64),
    ("bundle_combined_probability", pl.Float64),
]


def leg_rows(summary: RunSummary) -> list[dict[str, Any]]:
    """One row per committed leg, bundle order then leg order."""
    rows: list[dict[str, Any]] = []
    for bundle in summary.bundles:
        for leg_index, leg in enumerate(bundle.legs, start=1):
            row = leg.to_leg()
            row.update(
                {
                    "run_date": summary.run_date.isoformat(),
                    "strategy_name": summary.strategy_name,
                    "bundle_index": bundle.index,
                    "leg_index": leg_index,
                    "bundle_avg_conviction": round(bundle.avg_conviction, 4),
                    "bundle_combined_probability": round(bundle.combined_probability, 6),
                }
            )
            rows.append(row)
    return rows


def legs_frame(summary: RunSummary) -> pl.DataFrame:
    schema = dict(_LEG_TABLE_SCHEMA)
    rows = leg_rows(summary)
    if not rows:
        return pl.DataFrame(schema=schema)
    projected = [{name: row.get(name) for name in schema} for row in rows]
    return pl.DataFrame(projected, schema=schema)


def write_legs_parquet(summary: RunSummary, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    legs_frame(summary).write_parquet(path)
    return path
