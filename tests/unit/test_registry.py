"""Unit tests for the stake registry."""
import pytest
from staking_ledger.core.errors import InvalidAmount, InvalidTransition, StakeNotFound
from staking_ledger.core.registry import StakeRegistry
from staking_ledger.core.stake import StakeStatus


@pytest.fixture
def registry():
    return StakeRegistry()


def test_create_stake(registry):
    """Test creating a stake."""
    stake_id = registry.create_stake("alice", 1_000, 2, now=100)
    stake = registry.get_stake(stake_id)
    assert stake_id == 0
    assert stake.owner == "alice"
    assert stake.principal == 1_000
    assert stake.lock_tier == 2
    assert stake.deposited_at == 100
    assert stake.status == StakeStatus.ACTIVE
    assert stake.unlock_initiated_at is None


def test_ids_unique_across_owners(registry):
    """Test ids come from one registry-wide counter."""
    ids = [
        registry.create_stake("alice", 10, 0, now=0),
        registry.create_stake("bob", 10, 0, now=0),
        registry.create_stake("alice", 10, 1, now=1),
        registry.create_stake("carol", 10, 4, now=2),
    ]
    assert ids == [0, 1, 2, 3]
    assert registry.get_stake_ids_by_owner("alice") == [0, 2]
    assert registry.get_stake_ids_by_owner("bob") == [1]
    assert registry.get_stake_ids_by_owner("carol") == [3]


def test_unknown_owner_has_no_stakes(registry):
    assert registry.get_stake_ids_by_owner("nobody") == []


def test_create_stake_rejects_zero_principal(registry):
    with pytest.raises(InvalidAmount):
        registry.create_stake("alice", 0, 0, now=0)
    assert len(registry) == 0
    assert registry.get_stake_ids_by_owner("alice") == []


@pytest.mark.parametrize("stake_id", [0, -1, 5, "0", True])
def test_get_unknown_stake(registry, stake_id):
    with pytest.raises(StakeNotFound):
        registry.get_stake(stake_id)


def test_get_stake_returns_copy(registry):
    """Test callers cannot mutate stored stakes."""
    stake_id = registry.create_stake("alice", 1_000, 0, now=0)
    copy = registry.get_stake(stake_id)
    copy.principal = 1
    assert registry.get_stake(stake_id).principal == 1_000


def test_forward_transitions(registry):
    """Test status moves active -> unlocking -> withdrawn."""
    stake_id = registry.create_stake("alice", 1_000, 0, now=0)
    registry.transition(stake_id, StakeStatus.UNLOCKING, now=50)
    stake = registry.get_stake(stake_id)
    assert stake.status == StakeStatus.UNLOCKING
    assert stake.unlock_initiated_at == 50

    registry.transition(stake_id, StakeStatus.WITHDRAWN, now=80)
    assert registry.get_stake(stake_id).status == StakeStatus.WITHDRAWN
    # withdrawn stakes stay in the owner index
    assert registry.get_stake_ids_by_owner("alice") == [stake_id]


def test_invalid_transitions(registry):
    """Test skipping or reversing a status is rejected."""
    stake_id = registry.create_stake("alice", 1_000, 0, now=0)
    with pytest.raises(InvalidTransition):
        registry.transition(stake_id, StakeStatus.WITHDRAWN, now=1)
    with pytest.raises(InvalidTransition):
        registry.transition(stake_id, StakeStatus.ACTIVE, now=1)

    registry.transition(stake_id, StakeStatus.UNLOCKING, now=1)
    with pytest.raises(InvalidTransition):
        registry.transition(stake_id, StakeStatus.UNLOCKING, now=2)
    with pytest.raises(InvalidTransition):
        registry.transition(stake_id, StakeStatus.ACTIVE, now=2)
    assert registry.get_stake(stake_id).unlock_initiated_at == 1


def test_restake_in_place(registry):
    """Test restake resets the cycle but keeps the id."""
    stake_id = registry.create_stake("alice", 1_000, 1, now=0)
    registry.transition(stake_id, StakeStatus.UNLOCKING, now=10)
    registry.restake(stake_id, 1_050, 3, now=20, reward=50)

    stake = registry.get_stake(stake_id)
    assert stake.id == stake_id
    assert stake.principal == 1_050
    assert stake.lock_tier == 3
    assert stake.deposited_at == 20
    assert stake.unlock_initiated_at is None
    assert stake.status == StakeStatus.ACTIVE
    assert stake.rewarded == 50
    assert registry.get_stake_ids_by_owner("alice") == [stake_id]


def test_restake_withdrawn_rejected(registry):
    stake_id = registry.create_stake("alice", 1_000, 1, now=0)
    registry.transition(stake_id, StakeStatus.UNLOCKING, now=1)
    registry.transition(stake_id, StakeStatus.WITHDRAWN, now=2)
    with pytest.raises(InvalidTransition):
        registry.restake(stake_id, 2_000, 1, now=3)


def test_restore_from_snapshot(registry):
    """Test a registry rebuilt from its stakes continues the id sequence."""
    registry.create_stake("alice", 10, 0, now=0)
    registry.create_stake("bob", 20, 1, now=0)
    restored = StakeRegistry(registry.all_stakes(), registry.owner_index)
    assert restored.next_id == 2
    assert restored.create_stake("alice", 30, 2, now=5) == 2
    assert restored.get_stake_ids_by_owner("alice") == [0, 2]
