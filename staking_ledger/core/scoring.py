"""Launchpad tier scoring."""
from bisect import bisect_right
from typing import List, Tuple

from loguru import logger

from .config import NUM_LOCK_TIERS, StakingConfig, is_lock_tier, thresholds_valid
from .errors import InvalidAmount, InvalidConfiguration, InvalidTierIndex
from .registry import StakeRegistry
from .stake import Stake
from .uint import checked_add, checked_mul, is_uint


class TierScoreEngine:
    """Scores stakes and maps scores to launchpad tiers.

    Scores are computed on demand from the current table, so a change to a
    tier weight or the base value applies to existing stakes immediately.
    Every stake an owner ever created counts, whatever its status.
    """

    def __init__(self, config: StakingConfig, registry: StakeRegistry):
        self.config = config
        self.registry = registry

    def stake_score(self, stake: Stake) -> int:
        weight = self.config.tier_scores[stake.lock_tier]
        return checked_mul(checked_mul(stake.principal, weight), self.config.base_score_value)

    def tier_for_score(self, score: int) -> int:
        return bisect_right(self.config.launchpad_thresholds, score)

    def get_total_score(self, owner: str) -> int:
        total = 0
        for stake in self.registry.stakes_of(owner):
            total = checked_add(total, self.stake_score(stake))
        return total

    def get_tier_by_owner(self, owner: str) -> int:
        return self.tier_for_score(self.get_total_score(owner))

    def calculate_launchpad_tier(self, stake_id: int) -> int:
        return self.tier_for_score(self.stake_score(self.registry.get_stake(stake_id)))

    def get_launchpad_tiers_by_owner(self, owner: str) -> Tuple[List[int], List[int]]:
        """Per-stake launchpad tier and lock-tier score weight, in creation order."""
        tiers, multipliers = [], []
        for stake in self.registry.stakes_of(owner):
            tiers.append(self.tier_for_score(self.stake_score(stake)))
            multipliers.append(self.config.tier_scores[stake.lock_tier])
        return tiers, multipliers

    def set_base_score_value(self, value: int) -> None:
        if not is_uint(value):
            raise InvalidAmount(f"Base score value must be an unsigned integer, got {value!r}")
        self.config.base_score_value = value
        logger.info(f"Base score value set to {value}")

    def set_tier_score(self, tier_index: int, value: int) -> None:
        if not is_lock_tier(tier_index):
            raise InvalidTierIndex(
                f"Tier index must be in 0..{NUM_LOCK_TIERS - 1}, got {tier_index!r}"
            )
        if not is_uint(value):
            raise InvalidAmount(f"Tier score must be an unsigned integer, got {value!r}")
        self.config.tier_scores[tier_index] = value
        logger.info(f"Tier {tier_index} score set to {value}")

    def set_tier_thresholds(self, values: List[int]) -> None:
        values = list(values)
        if not all(is_uint(v) for v in values) or not thresholds_valid(values):
            raise InvalidConfiguration(
                f"Launchpad thresholds must be strictly ascending, got {values}"
            )
        self.config.launchpad_thresholds = values
        logger.info(f"Launchpad thresholds set to {values}")
