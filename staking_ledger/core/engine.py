"""Staking engine: the public operations of the ledger."""
from typing import List, Tuple

from loguru import logger

from .config import NUM_LOCK_TIERS, StakingConfig, is_lock_tier
from .errors import (
    InvalidAmount,
    InvalidTierIndex,
    InvalidTimestamp,
    InvalidTransition,
    NothingToRestake,
    Unauthorized,
)
from .pool import RewardPool
from .registry import StakeRegistry
from .rewards import RewardCalculator
from .scoring import TierScoreEngine
from .stake import Stake, StakeStatus
from .token import TokenLedger
from .uint import checked_add, is_uint
from .unlock import UnlockClock

DEFAULT_POOL_ACCOUNT = "staking-pool"


class StakingEngine:
    """Deterministic staking state machine.

    Operations are applied one at a time. Each one checks every
    precondition, including the token transfer it needs, before it mutates
    anything, so a raised StakingError always leaves the ledger unchanged.
    Time is never read from a clock; callers pass `now`.
    """

    def __init__(self,
                 token: TokenLedger,
                 admin: str,
                 pool_account: str = DEFAULT_POOL_ACCOUNT,
                 config: StakingConfig = None,
                 pool: RewardPool = None,
                 registry: StakeRegistry = None):
        """Initialize the staking engine.

        Args:
            token: Ledger of the staked token
            admin: Account allowed to fund the pool and change scoring
            pool_account: Token account holding staked principal and rewards
            config: Tier profiles and score table
            pool: Existing reward pool state
            registry: Existing stake registry
        """
        self.token = token
        self.admin = admin
        self.pool_account = pool_account
        self.config = config if config is not None else StakingConfig()
        self.pool = pool if pool is not None else RewardPool()
        self.registry = registry if registry is not None else StakeRegistry()
        self.clock = UnlockClock(self.config)
        self.rewards = RewardCalculator(self.config)
        self.scores = TierScoreEngine(self.config, self.registry)

    @property
    def is_open(self) -> bool:
        return self.pool.is_open

    @property
    def funded_amount(self) -> int:
        return self.pool.funded_amount

    # Pool

    def initialize(self, amount: int, caller: str) -> None:
        """Fund the reward pool and open staking. Allowed once."""
        self._require_admin(caller)
        self.pool.check_initialize(amount)
        self.token.transfer_from(self.pool_account, caller, self.pool_account, amount)
        self.pool.initialize(amount)

    def fund_pool(self, amount: int, caller: str) -> None:
        """Add to the reward budget of an open pool."""
        self._require_admin(caller)
        self.pool.check_fund(amount)
        self.token.transfer_from(self.pool_account, caller, self.pool_account, amount)
        self.pool.fund(amount)

    # Stake lifecycle

    def deposit(self, amount: int, lock_tier: int, caller: str, now: int) -> int:
        """Lock `amount` at `lock_tier` and return the new stake id."""
        self._require_timestamp(now)
        self.pool.ensure_open()
        if not is_uint(amount) or amount == 0:
            raise InvalidAmount(f"Deposit must be positive, got {amount!r}")
        self._require_lock_tier(lock_tier)
        self.token.transfer_from(self.pool_account, caller, self.pool_account, amount)
        stake_id = self.registry.create_stake(caller, amount, lock_tier, now)
        logger.info(f"{caller} deposited {amount} at lock tier {lock_tier} as stake {stake_id}")
        return stake_id

    def initiate_unlock(self, stake_id: int, caller: str, now: int) -> None:
        self._require_timestamp(now)
        stake = self._owned_stake(stake_id, caller)
        self.clock.check_initiate(stake)
        self.registry.transition(stake_id, StakeStatus.UNLOCKING, now)
        logger.info(
            f"Stake {stake_id} unlocking, withdrawable after "
            f"{now + self.clock.cooldown_for(stake.lock_tier)}"
        )

    def is_withdrawable(self, stake_id: int, now: int) -> bool:
        self._require_timestamp(now)
        return self.clock.is_withdrawable(self.registry.get_stake(stake_id), now)

    def calculate_reward(self, stake_id: int, now: int) -> int:
        self._require_timestamp(now)
        return self.rewards.calculate_reward(self.registry.get_stake(stake_id), now)

    def withdraw(self, stake_id: int, caller: str, now: int) -> int:
        """Return principal plus reward to the owner and close the stake."""
        self._require_timestamp(now)
        stake = self._owned_stake(stake_id, caller)
        self.clock.check_withdraw(stake, now)
        reward = self.rewards.calculate_reward(stake, now)
        self.pool.check_pay_out(reward)
        payout = checked_add(stake.principal, reward)
        self.token.transfer(self.pool_account, stake.owner, payout)
        self.pool.pay_out(reward)
        self.registry.record_reward(stake_id, reward)
        self.registry.transition(stake_id, StakeStatus.WITHDRAWN, now)
        logger.info(f"Stake {stake_id} withdrawn: {stake.principal} principal + {reward} reward")
        return payout

    def restake(self, stake_id: int, new_tier: int, caller: str, now: int) -> None:
        """Fold the accrued reward into the principal and relock in place.

        The stake keeps its id; it becomes active again at `new_tier` with
        `deposited_at = now`.
        """
        self._require_timestamp(now)
        stake = self._owned_stake(stake_id, caller)
        if stake.status is StakeStatus.WITHDRAWN:
            raise InvalidTransition(f"Stake {stake_id} is already withdrawn")
        self._require_lock_tier(new_tier)
        reward = self.rewards.calculate_reward(stake, now)
        if reward == 0:
            raise NothingToRestake(f"Stake {stake_id} has no reward to restake")
        self.pool.check_pay_out(reward)
        principal = checked_add(stake.principal, reward)
        self.pool.pay_out(reward)
        self.registry.restake(stake_id, principal, new_tier, now, reward=reward)
        logger.info(
            f"Stake {stake_id} restaked {reward} reward at lock tier {new_tier}, "
            f"principal now {principal}"
        )

    # Queries

    def get_stake(self, stake_id: int) -> Stake:
        return self.registry.get_stake(stake_id)

    def get_stake_ids_by_owner(self, owner: str) -> List[int]:
        return self.registry.get_stake_ids_by_owner(owner)

    def get_total_score(self, owner: str) -> int:
        return self.scores.get_total_score(owner)

    def get_tier_by_owner(self, owner: str) -> int:
        return self.scores.get_tier_by_owner(owner)

    def calculate_launchpad_tier(self, stake_id: int) -> int:
        return self.scores.calculate_launchpad_tier(stake_id)

    def get_launchpad_tiers_by_owner(self, owner: str) -> Tuple[List[int], List[int]]:
        return self.scores.get_launchpad_tiers_by_owner(owner)

    # Admin

    def set_base_score_value(self, value: int, caller: str) -> None:
        self._require_admin(caller)
        self.scores.set_base_score_value(value)

    def set_tier_score(self, tier_index: int, value: int, caller: str) -> None:
        self._require_admin(caller)
        self.scores.set_tier_score(tier_index, value)

    def set_tier_thresholds(self, values: List[int], caller: str) -> None:
        self._require_admin(caller)
        self.scores.set_tier_thresholds(values)

    def _require_admin(self, caller: str) -> None:
        if caller != self.admin:
            raise Unauthorized(f"{caller} is not the staking admin")

    def _require_timestamp(self, now: int) -> None:
        if not is_uint(now):
            raise InvalidTimestamp(f"Timestamp must be a non-negative integer, got {now!r}")

    def _require_lock_tier(self, lock_tier: int) -> None:
        if not is_lock_tier(lock_tier):
            raise InvalidTierIndex(
                f"Lock tier must be in 0..{NUM_LOCK_TIERS - 1}, got {lock_tier!r}"
            )

    def _owned_stake(self, stake_id: int, caller: str) -> Stake:
        stake = self.registry.get_stake(stake_id)
        if stake.owner != caller:
            raise Unauthorized(f"{caller} does not own stake {stake_id}")
        return stake
