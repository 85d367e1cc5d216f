"""Reward accrual."""
from .config import BPS_DENOMINATOR, SECONDS_PER_YEAR, StakingConfig
from .stake import Stake, StakeStatus
from .uint import checked_mul


class RewardCalculator:
    """Simple-interest rewards at the lock tier's annual rate.

    reward = principal * rate_bps * elapsed // (10_000 * seconds_per_year)

    Integer floor division keeps results reproducible. Accrual runs from
    `deposited_at` (reset by a restake) and continues through the unlock
    cooldown; withdrawn stakes accrue nothing further.
    """

    def __init__(self, config: StakingConfig):
        self.config = config

    def annual_rate_bps(self, lock_tier: int) -> int:
        return self.config.tier_profiles[lock_tier].annual_rate_bps

    def calculate_reward(self, stake: Stake, now: int) -> int:
        if stake.status is StakeStatus.WITHDRAWN:
            return 0
        elapsed = now - stake.deposited_at
        if elapsed <= 0:
            return 0
        numerator = checked_mul(
            checked_mul(stake.principal, self.annual_rate_bps(stake.lock_tier)),
            elapsed,
        )
        return numerator // (BPS_DENOMINATOR * SECONDS_PER_YEAR)
