"""Staking engine core."""
from .config import StakingConfig, TierProfile, load_config
from .engine import StakingEngine
from .errors import StakingError
from .stake import Stake, StakeStatus
from .store import StateStore
from .token import InMemoryTokenLedger, TokenLedger

__all__ = [
    "InMemoryTokenLedger",
    "Stake",
    "StakeStatus",
    "StakingConfig",
    "StakingEngine",
    "StakingError",
    "StateStore",
    "TierProfile",
    "TokenLedger",
    "load_config",
]
