"""Unlock and withdrawal gating."""
from .config import StakingConfig
from .errors import InvalidTransition, StillLocked
from .stake import Stake, StakeStatus


class UnlockClock:
    """Decides when a stake may start unlocking and when it may be withdrawn.

    Unlocking may be initiated at any time while a stake is active; the
    per-tier cooldown only gates withdrawal.
    """

    def __init__(self, config: StakingConfig):
        self.config = config

    def cooldown_for(self, lock_tier: int) -> int:
        return self.config.tier_profiles[lock_tier].cooldown

    def check_initiate(self, stake: Stake) -> None:
        if stake.status is not StakeStatus.ACTIVE:
            raise InvalidTransition(
                f"Stake {stake.id} is {stake.status.value}, only active stakes can unlock"
            )

    def withdrawable_at(self, stake: Stake):
        """Earliest withdrawal time, or None while not unlocking."""
        if stake.status is not StakeStatus.UNLOCKING:
            return None
        return stake.unlock_initiated_at + self.cooldown_for(stake.lock_tier)

    def is_withdrawable(self, stake: Stake, now: int) -> bool:
        ready_at = self.withdrawable_at(stake)
        return ready_at is not None and now >= ready_at

    def check_withdraw(self, stake: Stake, now: int) -> None:
        if stake.status is StakeStatus.WITHDRAWN:
            raise InvalidTransition(f"Stake {stake.id} is already withdrawn")
        if stake.status is StakeStatus.ACTIVE:
            raise StillLocked(f"Stake {stake.id} must be unlocked before withdrawal")
        if not self.is_withdrawable(stake, now):
            raise StillLocked(
                f"Stake {stake.id} is in cooldown until {self.withdrawable_at(stake)}"
            )
