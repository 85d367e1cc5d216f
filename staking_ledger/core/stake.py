"""Stake positions."""
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class StakeStatus(str, Enum):
    """Lifecycle of a stake within one lock cycle."""
    ACTIVE = "active"
    UNLOCKING = "unlocking"
    WITHDRAWN = "withdrawn"

    @property
    def rank(self) -> int:
        return _ORDER.index(self)


_ORDER = [StakeStatus.ACTIVE, StakeStatus.UNLOCKING, StakeStatus.WITHDRAWN]


class Stake(BaseModel):
    """Record of one locked position."""
    id: int
    owner: str
    principal: int
    deposited_at: int
    lock_tier: int
    unlock_initiated_at: Optional[int] = None
    status: StakeStatus = StakeStatus.ACTIVE
    rewarded: int = 0  # cumulative reward credited, restaked or paid out
