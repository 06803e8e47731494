"""Runtime configuration loader (config-first, flag-overrides)."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from prop_parlay.candidates import DEFAULT_BLOCKED_PROP_TYPES
from prop_parlay.errors import ConfigError
from prop_parlay.util.parsing import safe_int

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.toml"
DEFAULT_LOCAL_OVERRIDE_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.local.toml"


@dataclass(frozen=True)
class RuntimeConfig:
    """Materialized runtime configuration."""

    config_path: Path | None
    output_dir: Path
    target_bundles: int
    legs_per_bundle: int
    exposure_cap: int
    reuse_cap: int
    attempt_multiplier: int
    perturb_window: int
    strict_same_player: bool
    seed: int | None
    blocked_prop_types: tuple[str, ...]
    min_line: float
    strategy_name: str
    simulated_stake: float
    write_parquet: bool


_CURRENT_RUNTIME_CONFIG: RuntimeConfig | None = None


def set_current_runtime_config(config: RuntimeConfig | None) -> None:
    global _CURRENT_RUNTIME_CONFIG
    _CURRENT_RUNTIME_CONFIG = config


def current_runtime_config() -> RuntimeConfig:
    config = _CURRENT_RUNTIME_CONFIG
    if config is not None:
        return config
    loaded = load_runtime_config()
    set_current_runtime_config(loaded)
    return loaded


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in overlay.items():
        existing = out.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            out[key] = _deep_merge(existing, value)
        else:
            out[key] = value
    return out


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"failed reading runtime config: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid runtime config TOML: {path}") from exc
    return payload


def _as_table(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"runtime config section [{key}] must be a table")
    return value


def _as_str(value: Any, *, default: str) -> str:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped:
            return stripped
    return default


def _as_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default


def _as_int(value: Any, *, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


def _as_float(value: Any, *, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


def _as_csv_list(values: Any, *, default: tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(values, list):
        return tuple(str(value).strip() for value in values if str(value).strip())
    if isinstance(values, str):
        return tuple(part.strip() for part in values.split(",") if part.strip())
    return default


def _resolve_path(raw: Any, *, default: str, base_dir: Path) -> Path:
    value = _as_str(raw, default=default)
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return path


def runtime_config_from_payload(
    payload: dict[str, Any], *, source: Path | None, base_dir: Path
) -> RuntimeConfig:
    paths = _as_table(payload, "paths")
    engine = _as_table(payload, "engine")
    candidates = _as_table(payload, "candidates")
    output = _as_table(payload, "output")

    return RuntimeConfig(
        config_path=source,
        output_dir=_resolve_path(paths.get("output_dir"), default="reports", base_dir=base_dir),
        target_bundles=_as_int(engine.get("target_bundles"), default=8),
        legs_per_bundle=_as_int(engine.get("legs_per_bundle"), default=3),
        exposure_cap=_as_int(engine.get("exposure_cap"), default=5),
        reuse_cap=_as_int(engine.get("reuse_cap"), default=2),
        attempt_multiplier=_as_int(engine.get("attempt_multiplier"), default=3),
        perturb_window=_as_int(engine.get("perturb_window"), default=10),
        strict_same_player=_as_bool(engine.get("strict_same_player"), default=True),
        seed=safe_int(engine.get("seed")),
        blocked_prop_types=_as_csv_list(
            candidates.get("blocked_prop_types"),
            default=DEFAULT_BLOCKED_PROP_TYPES,
        ),
        min_line=_as_float(candidates.get("min_line"), default=0.0),
        strategy_name=_as_str(output.get("strategy_name"), default="conviction_bundles"),
        simulated_stake=_as_float(output.get("simulated_stake"), default=10.0),
        write_parquet=_as_bool(output.get("write_parquet"), default=False),
    )


def load_runtime_config(config_path: Path | None = None) -> RuntimeConfig:
    """Load runtime config from `config/runtime.toml` plus optional local override.

    An explicit path must exist. When the bundled default file is absent (for
    example in a non-editable install) built-in defaults are used.
    """
    if config_path is not None:
        source = config_path.expanduser().resolve()
        if not source.exists():
            raise ConfigError(f"runtime config file not found: {source}")
        return runtime_config_from_payload(
            _read_toml(source), source=source, base_dir=source.parent
        )

    if not DEFAULT_CONFIG_PATH.exists():
        return runtime_config_from_payload({}, source=None, base_dir=Path.cwd())
    payload = _read_toml(DEFAULT_CONFIG_PATH)
    if DEFAULT_LOCAL_OVERRIDE_PATH.exists():
        payload = _deep_merge(payload, _read_toml(DEFAULT_LOCAL_OVERRIDE_PATH))
    return runtime_config_from_payload(
        payload, source=DEFAULT_CONFIG_PATH, base_dir=DEFAULT_CONFIG_PATH.parent
    )
