"""Staking configuration."""
import os
from pathlib import Path
from typing import List, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

DAY = 24 * 60 * 60
SECONDS_PER_YEAR = 365 * DAY
BPS_DENOMINATOR = 10_000

NUM_LOCK_TIERS = 5
NUM_LAUNCHPAD_TIERS = 5


def get_state_dir() -> str:
    """Get the ledger state directory path."""
    return os.getenv(
        "STAKING_LEDGER_STATE_DIR",
        os.path.join(os.path.expanduser("~"), ".staking-ledger")
    )


class TierProfile(BaseModel):
    """Lock tier parameters."""
    cooldown: int  # seconds between initiating unlock and withdrawal
    annual_rate_bps: int

    @field_validator("cooldown", "annual_rate_bps")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be non-negative")
        return value


def _default_profiles() -> List[TierProfile]:
    return [
        TierProfile(cooldown=7 * DAY, annual_rate_bps=500),
        TierProfile(cooldown=10 * DAY, annual_rate_bps=1000),
        TierProfile(cooldown=14 * DAY, annual_rate_bps=1500),
        TierProfile(cooldown=21 * DAY, annual_rate_bps=2000),
        TierProfile(cooldown=30 * DAY, annual_rate_bps=2500),
    ]


class StakingConfig(BaseModel):
    """Tier profiles and the launchpad score table."""
    tier_profiles: List[TierProfile] = Field(default_factory=_default_profiles)
    tier_scores: List[int] = [1, 2, 3, 4, 5]
    base_score_value: int = 1
    launchpad_thresholds: List[int] = [1_000, 5_000, 20_000, 50_000]

    @field_validator("tier_profiles")
    @classmethod
    def _check_profiles(cls, value: List[TierProfile]) -> List[TierProfile]:
        if len(value) != NUM_LOCK_TIERS:
            raise ValueError(f"expected {NUM_LOCK_TIERS} tier profiles, got {len(value)}")
        return value

    @field_validator("tier_scores")
    @classmethod
    def _check_scores(cls, value: List[int]) -> List[int]:
        if len(value) != NUM_LOCK_TIERS:
            raise ValueError(f"expected {NUM_LOCK_TIERS} tier scores, got {len(value)}")
        if any(v < 0 for v in value):
            raise ValueError("tier scores must be non-negative")
        return value

    @field_validator("base_score_value")
    @classmethod
    def _check_base(cls, value: int) -> int:
        if value < 0:
            raise ValueError("base score value must be non-negative")
        return value

    @field_validator("launchpad_thresholds")
    @classmethod
    def _check_thresholds(cls, value: List[int]) -> List[int]:
        if not thresholds_valid(value):
            raise ValueError(
                f"expected {NUM_LAUNCHPAD_TIERS - 1} strictly ascending thresholds"
            )
        return value


def is_lock_tier(tier) -> bool:
    return isinstance(tier, int) and not isinstance(tier, bool) and 0 <= tier < NUM_LOCK_TIERS


def thresholds_valid(values: List[int]) -> bool:
    if len(values) != NUM_LAUNCHPAD_TIERS - 1:
        return False
    if any(v < 0 for v in values):
        return False
    return all(a < b for a, b in zip(values, values[1:]))


def load_config(config_path: Optional[Path] = None) -> StakingConfig:
    """Load staking configuration.

    Args:
        config_path: Path to a YAML file overriding the defaults

    Returns:
        Validated configuration
    """
    if config_path is None:
        return StakingConfig()
    try:
        with open(config_path) as f:
            config_dict = yaml.safe_load(f) or {}
        return StakingConfig(**config_dict)
    except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
        logger.error(f"Failed to load config: {e}")
        logger.info("Using default configuration")
        return StakingConfig()
