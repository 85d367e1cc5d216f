"""Test configuration and fixtures for Staking Ledger."""
import os
import pytest
from staking_ledger.core.config import DAY, StakingConfig
from staking_ledger.core.engine import StakingEngine
from staking_ledger.core.token import InMemoryTokenLedger

ADMIN = "admin"
POOL_FUNDING = 100_000_000


@pytest.fixture
def config():
    """Default staking configuration."""
    return StakingConfig()


@pytest.fixture
def token():
    """Token ledger with funded admin and users."""
    ledger = InMemoryTokenLedger()
    ledger.mint(ADMIN, POOL_FUNDING * 2)
    for user in ("user1", "user2", "user3", "user4", "user5"):
        ledger.mint(user, 100_000)
    return ledger


@pytest.fixture
def closed_engine(token, config):
    """Engine whose reward pool has not been initialized."""
    return StakingEngine(token, ADMIN, config=config)


@pytest.fixture
def engine(closed_engine, token):
    """Engine with an open reward pool and users approved for staking."""
    token.approve(ADMIN, closed_engine.pool_account, POOL_FUNDING)
    closed_engine.initialize(POOL_FUNDING, ADMIN)
    for user in ("user1", "user2", "user3", "user4", "user5"):
        token.approve(user, closed_engine.pool_account, 100_000)
    return closed_engine


@pytest.fixture
def day():
    return DAY


@pytest.fixture
def state_dir(tmp_path):
    """Point the ledger state directory at a temporary path."""
    path = tmp_path / "ledger"
    os.environ["STAKING_LEDGER_STATE_DIR"] = str(path)
    yield path
    os.environ.pop("STAKING_LEDGER_STATE_DIR", None)
