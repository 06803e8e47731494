"""CLI entrypoint for prop-parlay."""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from prop_parlay.candidates import load_candidates
from prop_parlay.conviction import conviction_breakdown, rank_candidates
from prop_parlay.engine import RunSummary, run_engine
from prop_parlay.errors import PropParlayError
from prop_parlay.export import leg_rows, write_legs_parquet
from prop_parlay.io_utils import atomic_write_json, atomic_write_jsonl, load_rows
from prop_parlay.runtime_config import load_runtime_config, set_current_runtime_config
from prop_parlay.settings import Settings
from prop_parlay.signals import build_confirmation_lookup, build_performance_lookup
from prop_parlay.time_utils import et_run_id, utc_now_str

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_BUNDLES = 1
EXIT_ERROR = 2


class CLIError(PropParlayError):
    """User-facing CLI error."""


def _configure_logging(level: str) -> None:
    numeric = logging.getLevelName(level.strip().upper())
    if not isinstance(numeric, int):
        raise CLIError(f"invalid log level: {level}")
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_settings(args: argparse.Namespace) -> Settings:
    config_arg = str(getattr(args, "config", "") or "").strip()
    runtime = load_runtime_config(Path(config_arg) if config_arg else None)
    set_current_runtime_config(runtime)
    settings = Settings.from_runtime(runtime)

    # Explicit flags win over both env and TOML.
    updates: dict[str, Any] = {}
    output_dir = str(getattr(args, "output_dir", "") or "").strip()
    if output_dir:
        updates["output_dir"] = str(Path(output_dir).expanduser().resolve())
    if getattr(args, "bundles", None) is not None:
        updates["target_bundles"] = int(args.bundles)
    if getattr(args, "seed", None) is not None:
        updates["seed"] = int(args.seed)
    return settings.model_copy(update=updates) if updates else settings


def _optional_rows(raw: str) -> list[dict[str, Any]]:
    value = raw.strip()
    if not value:
        return []
    return load_rows(Path(value).expanduser())


def _rng_for(settings: Settings) -> random.Random:
    if settings.seed is None:
        return random.Random()
    return random.Random(settings.seed)


def _print_summary(summary: RunSummary) -> None:
    print(summary.message)
    for bundle in summary.bundles:
        print(
            f"#{bundle.index} avg={bundle.avg_conviction:.1f} "
            f"p={bundle.combined_probability:.3f} fair={bundle.expected_american}"
        )
        for leg in bundle.legs:
            print(
                f"  {leg.player} {leg.stat} {leg.side} {leg.line:g} "
                f"edge={leg.edge_pct:g} score={leg.conviction:.1f}"
                + (" confirmed" if leg.confirmed else "")
            )


def _write_artifacts(summary: RunSummary, *, settings: Settings, parquet: bool) -> Path:
    run_dir = settings.output_path / summary.run_date.isoformat() / et_run_id()
    payload = summary.to_payload()
    payload["generated_at_utc"] = utc_now_str()
    atomic_write_json(run_dir / "bundles.json", payload)
    atomic_write_jsonl(run_dir / "bundle-legs.jsonl", leg_rows(summary))
    if parquet:
        write_legs_parquet(summary, run_dir / "bundle-legs.parquet")
    return run_dir


def _cmd_build(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    rows = load_rows(Path(args.candidates).expanduser())
    summary = run_engine(
        rows,
        confirmation_rows=_optional_rows(args.confirmations),
        performance_rows=_optional_rows(args.performance),
        config=settings.build_config(),
        options=settings.run_options(),
        rng=_rng_for(settings),
    )

    if args.json:
        print(json.dumps(summary.to_payload(), sort_keys=True, indent=2))
    else:
        _print_summary(summary)

    if not args.no_write:
        run_dir = _write_artifacts(
            summary,
            settings=settings,
            parquet=bool(args.parquet or settings.write_parquet),
        )
        logger.info("wrote bundle artifacts to %s", run_dir)
        if not args.json:
            print(f"artifacts: {run_dir}")

    return EXIT_OK if summary.feasible else EXIT_NO_BUNDLES


def _cmd_score(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    pool = load_candidates(
        load_rows(Path(args.candidates).expanduser()),
        blocked_prop_types=settings.blocked_prop_type_list,
        min_line=settings.min_line,
    )
    confirmations = build_confirmation_lookup(_optional_rows(args.confirmations))
    performance = build_performance_lookup(_optional_rows(args.performance))
    ranked = rank_candidates(pool.picks, confirmations=confirmations, performance=performance)
    if not ranked:
        print("no candidates")
        return EXIT_NO_BUNDLES

    top_n = max(0, int(args.top))
    for rank, pick in enumerate(ranked[:top_n] if top_n else ranked, start=1):
        parts = conviction_breakdown(
            pick,
            confirmation=confirmations.get(pick.exposure_key),
            performance=performance.get(pick.exposure_key),
        )
        print(
            f"{rank:>3} {pick.conviction:6.1f} {pick.player} {pick.stat} {pick.side} "
            f"[edge={parts.edge:.1f} tier={parts.tier:g} confirm={parts.confirmation:g} "
            f"side={parts.side:g} history={parts.history:g}]"
        )
    if pool.rejected:
        print(f"excluded {len(pool.rejected)} malformed rows")
    return EXIT_OK


def _cmd_config_show(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    print(json.dumps(settings.model_dump(), sort_keys=True, indent=2))
    return EXIT_OK


def _add_input_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--candidates", required=True, help="Candidate rows (jsonl/json/csv/parquet)"
    )
    parser.add_argument("--confirmations", default="", help="Independent-confirmation rows")
    parser.add_argument("--performance", default="", help="Trailing performance rows")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prop-parlay")
    parser.add_argument(
        "--config",
        default="",
        help="Path to runtime config TOML (default: config/runtime.toml).",
    )
    parser.add_argument("--log-level", default="WARNING")
    subparsers = parser.add_subparsers(dest="command")

    build = subparsers.add_parser("build", help="Build conviction bundles for one slate")
    build.set_defaults(func=_cmd_build)
    _add_input_args(build)
    build.add_argument("--seed", type=int, default=None)
    build.add_argument("--bundles", type=int, default=None, help="Target bundle count")
    build.add_argument("--output-dir", default="")
    build.add_argument("--parquet", action="store_true", help="Also write bundle-legs.parquet")
    build.add_argument("--no-write", action="store_true", help="Skip writing artifacts")
    build.add_argument("--json", action="store_true", help="Print the run payload as JSON")

    score = subparsers.add_parser("score", help="Rank candidates with score breakdowns")
    score.set_defaults(func=_cmd_score)
    _add_input_args(score)
    score.add_argument("--top", type=int, default=20)

    config = subparsers.add_parser("config", help="Inspect resolved configuration")
    config_subparsers = config.add_subparsers(dest="config_command")
    config_show = config_subparsers.add_parser("show", help="Print resolved settings")
    config_show.set_defaults(func=_cmd_config_show)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return EXIT_OK
    try:
        _configure_logging(args.log_level)
        return int(func(args))
    except (PropParlayError, ValidationError, FileNotFoundError, ValueError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_ERROR
    finally:
        set_current_runtime_config(None)


if __name__ == "__main__":
    raise SystemExit(main())
