"""Application settings for prop-parlay."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from prop_parlay.builder import BuildConfig
from prop_parlay.engine import RunOptions
from prop_parlay.runtime_config import RuntimeConfig, current_runtime_config

ENV_PREFIX = "PROP_PARLAY_"


class Settings(BaseSettings):
    """Engine settings; environment variables override the runtime TOML."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    output_dir: str = "reports"
    target_bundles: int = Field(default=8, ge=1)
    legs_per_bundle: int = Field(default=3, ge=1)
    exposure_cap: int = Field(default=5, ge=1)
    reuse_cap: int = Field(default=2, ge=1)
    attempt_multiplier: int = Field(default=3, ge=1)
    perturb_window: int = Field(default=10, ge=1)
    strict_same_player: bool = True
    seed: int | None = None
    blocked_prop_types: str = "player_steals,player_blocks"
    min_line: float = 0.0
    strategy_name: str = "conviction_bundles"
    simulated_stake: float = 10.0
    write_parquet: bool = False

    @classmethod
    def from_runtime(cls, runtime: RuntimeConfig | None = None) -> "Settings":
        """Construct settings from runtime config; set env vars still take precedence."""
        config = runtime or current_runtime_config()
        values = {
            "output_dir": str(config.output_dir),
            "target_bundles": config.target_bundles,
            "legs_per_bundle": config.legs_per_bundle,
            "exposure_cap": config.exposure_cap,
            "reuse_cap": config.reuse_cap,
            "attempt_multiplier": config.attempt_multiplier,
            "perturb_window": config.perturb_window,
            "strict_same_player": config.strict_same_player,
            "seed": config.seed,
            "blocked_prop_types": ",".join(config.blocked_prop_types),
            "min_line": config.min_line,
            "strategy_name": config.strategy_name,
            "simulated_stake": config.simulated_stake,
            "write_parquet": config.write_parquet,
        }
        overrides = {
            name: value
            for name, value in values.items()
            if not os.environ.get(f"{ENV_PREFIX}{name.upper()}", "").strip()
        }
        return cls(**overrides)

    @property
    def blocked_prop_type_list(self) -> tuple[str, ...]:
        return tuple(part.strip() for part in self.blocked_prop_types.split(",") if part.strip())

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir).expanduser()

    def build_config(self) -> BuildConfig:
        return BuildConfig(
            target_bundles=self.target_bundles,
            legs_per_bundle=self.legs_per_bundle,
            exposure_cap=self.exposure_cap,
            reuse_cap=self.reuse_cap,
            attempt_multiplier=self.attempt_multiplier,
            perturb_window=self.perturb_window,
            strict_same_player=self.strict_same_player,
        )

    def run_options(self) -> RunOptions:
        return RunOptions(
            strategy_name=self.strategy_name,
            blocked_prop_types=self.blocked_prop_type_list,
            min_line=self.min_line,
            simulated_stake=self.simulated_stake,
        )
