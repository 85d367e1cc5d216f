"""JSON persistence of the whole ledger."""
import json
import os
from typing import Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from .config import StakingConfig, get_state_dir
from .engine import DEFAULT_POOL_ACCOUNT, StakingEngine
from .errors import CorruptState
from .pool import RewardPool, RewardPoolState
from .registry import StakeRegistry
from .stake import Stake
from .token import InMemoryTokenLedger

STATE_FILE = "ledger.json"


class LedgerState(BaseModel):
    """Snapshot of an engine backed by the in-memory token ledger."""
    admin: str
    pool_account: str = DEFAULT_POOL_ACCOUNT
    config: StakingConfig = Field(default_factory=StakingConfig)
    pool: RewardPoolState = Field(default_factory=RewardPoolState)
    stakes: List[Stake] = []
    owner_index: Dict[str, List[int]] = {}
    balances: Dict[str, int] = {}
    allowances: Dict[str, Dict[str, int]] = {}


def snapshot(engine: StakingEngine) -> LedgerState:
    token = engine.token
    return LedgerState(
        admin=engine.admin,
        pool_account=engine.pool_account,
        config=engine.config.model_copy(deep=True),
        pool=engine.pool.state.model_copy(),
        stakes=engine.registry.all_stakes(),
        owner_index=engine.registry.owner_index,
        balances=dict(token.balances),
        allowances={owner: dict(s) for owner, s in token.allowances.items()},
    )


def restore(state: LedgerState) -> StakingEngine:
    return StakingEngine(
        token=InMemoryTokenLedger(state.balances, state.allowances),
        admin=state.admin,
        pool_account=state.pool_account,
        config=state.config,
        pool=RewardPool(state.pool),
        registry=StakeRegistry(state.stakes, state.owner_index),
    )


class StateStore:
    """Loads and saves a ledger snapshot in the state directory."""

    def __init__(self, state_dir: Optional[str] = None):
        self.state_dir = state_dir or get_state_dir()
        self.path = os.path.join(self.state_dir, STATE_FILE)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load(self) -> Optional[StakingEngine]:
        """Load the saved engine, or None if nothing was saved yet."""
        if not self.exists():
            return None
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
            state = LedgerState.model_validate(data)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            logger.error(f"Failed to load ledger state from {self.path}: {e}")
            raise CorruptState(f"Ledger state in {self.path} is unreadable") from e
        return restore(state)

    def save(self, engine: StakingEngine) -> None:
        os.makedirs(self.state_dir, exist_ok=True)
        tmp_path = self.path + ".tmp"
        with open(tmp_path, 'w') as f:
            json.dump(snapshot(engine).model_dump(mode="json"), f, indent=2)
        os.replace(tmp_path, self.path)
        logger.debug(f"Saved ledger state to {self.path}")
