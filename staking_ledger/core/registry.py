"""Stake registry: the only owner of stake records."""
from typing import Dict, Iterator, List

from loguru import logger

from .errors import InvalidAmount, InvalidTransition, StakeNotFound
from .stake import Stake, StakeStatus
from .uint import is_uint


class StakeRegistry:
    """Dense arena of stakes keyed by a global monotonic id.

    Ids are list positions, so lookup is O(1) and the next id is simply the
    arena length. The owner index keeps every id an owner ever created, in
    creation order, including withdrawn ones.
    """

    def __init__(self, stakes: List[Stake] = None, owner_index: Dict[str, List[int]] = None):
        self._stakes: List[Stake] = list(stakes or [])
        self._owner_index: Dict[str, List[int]] = {
            owner: list(ids) for owner, ids in (owner_index or {}).items()
        }

    def __len__(self) -> int:
        return len(self._stakes)

    @property
    def next_id(self) -> int:
        return len(self._stakes)

    @property
    def owner_index(self) -> Dict[str, List[int]]:
        return {owner: list(ids) for owner, ids in self._owner_index.items()}

    def all_stakes(self) -> List[Stake]:
        return [stake.model_copy() for stake in self._stakes]

    def create_stake(self, owner: str, principal: int, lock_tier: int, now: int) -> int:
        """Create an active stake and return its id."""
        if not is_uint(principal) or principal == 0:
            raise InvalidAmount(f"Stake principal must be positive, got {principal!r}")
        stake_id = self.next_id
        self._stakes.append(Stake(
            id=stake_id,
            owner=owner,
            principal=principal,
            deposited_at=now,
            lock_tier=lock_tier,
        ))
        self._owner_index.setdefault(owner, []).append(stake_id)
        logger.debug(f"Created stake {stake_id} for {owner}")
        return stake_id

    def get_stake(self, stake_id: int) -> Stake:
        """Get a copy of a stake; mutation goes through the registry."""
        return self._get(stake_id).model_copy()

    def get_stake_ids_by_owner(self, owner: str) -> List[int]:
        return list(self._owner_index.get(owner, []))

    def stakes_of(self, owner: str) -> Iterator[Stake]:
        for stake_id in self._owner_index.get(owner, []):
            yield self._stakes[stake_id].model_copy()

    def transition(self, stake_id: int, new_status: StakeStatus, now: int) -> None:
        """Advance a stake's status; only forward single steps are allowed."""
        stake = self._get(stake_id)
        if new_status.rank != stake.status.rank + 1:
            raise InvalidTransition(
                f"Stake {stake_id} cannot move from {stake.status.value} to {new_status.value}"
            )
        if new_status is StakeStatus.UNLOCKING:
            stake.unlock_initiated_at = now
        stake.status = new_status

    def restake(self, stake_id: int, principal: int, lock_tier: int, now: int,
                reward: int = 0) -> None:
        """Start a new lock cycle on an existing id."""
        stake = self._get(stake_id)
        if stake.status is StakeStatus.WITHDRAWN:
            raise InvalidTransition(f"Stake {stake_id} is already withdrawn")
        if not is_uint(principal) or principal == 0:
            raise InvalidAmount(f"Stake principal must be positive, got {principal!r}")
        stake.principal = principal
        stake.lock_tier = lock_tier
        stake.deposited_at = now
        stake.unlock_initiated_at = None
        stake.status = StakeStatus.ACTIVE
        stake.rewarded += reward

    def record_reward(self, stake_id: int, reward: int) -> None:
        self._get(stake_id).rewarded += reward

    def _get(self, stake_id: int) -> Stake:
        if not isinstance(stake_id, int) or isinstance(stake_id, bool) \
                or not 0 <= stake_id < len(self._stakes):
            raise StakeNotFound(f"Stake {stake_id!r} not found")
        return self._stakes[stake_id]
