"""Unit tests for launchpad tier scoring."""
import pytest
from staking_ledger.core.errors import (
    InvalidAmount,
    InvalidConfiguration,
    InvalidTierIndex,
    Overflow,
    StakeNotFound,
)
from staking_ledger.core.registry import StakeRegistry
from staking_ledger.core.scoring import TierScoreEngine
from staking_ledger.core.stake import StakeStatus
from staking_ledger.core.uint import UINT256_MAX


@pytest.fixture
def registry():
    return StakeRegistry()


@pytest.fixture
def scores(config, registry):
    return TierScoreEngine(config, registry)


def test_stake_score(scores, registry):
    """Test score is principal * tier weight * base value."""
    stake_id = registry.create_stake("alice", 1_000, 2, now=0)
    assert scores.stake_score(registry.get_stake(stake_id)) == 3_000
    scores.set_base_score_value(10)
    assert scores.stake_score(registry.get_stake(stake_id)) == 30_000


def test_total_score_sums_all_stakes(scores, registry):
    registry.create_stake("alice", 1_000, 0, now=0)
    registry.create_stake("bob", 9_999, 4, now=0)
    registry.create_stake("alice", 500, 3, now=0)
    assert scores.get_total_score("alice") == 1_000 * 1 + 500 * 4
    assert scores.get_total_score("nobody") == 0


def test_withdrawn_stakes_still_count(scores, registry):
    stake_id = registry.create_stake("alice", 1_000, 1, now=0)
    registry.transition(stake_id, StakeStatus.UNLOCKING, now=1)
    registry.transition(stake_id, StakeStatus.WITHDRAWN, now=2)
    assert scores.get_total_score("alice") == 2_000


@pytest.mark.parametrize("score,expected", [
    (0, 0),
    (999, 0),
    (1_000, 1),
    (4_999, 1),
    (5_000, 2),
    (20_000, 3),
    (49_999, 3),
    (50_000, 4),
    (10**30, 4),
])
def test_tier_for_score(scores, score, expected):
    assert scores.tier_for_score(score) == expected


def test_tier_by_owner(scores, registry):
    registry.create_stake("alice", 1_000, 0, now=0)
    assert scores.get_tier_by_owner("alice") == 1
    registry.create_stake("alice", 2_000, 1, now=0)
    assert scores.get_tier_by_owner("alice") == 2
    assert scores.get_tier_by_owner("nobody") == 0


def test_single_stake_tier(scores, registry):
    registry.create_stake("alice", 1_000, 0, now=0)
    registry.create_stake("alice", 10_000, 4, now=0)
    assert scores.calculate_launchpad_tier(0) == 1
    assert scores.calculate_launchpad_tier(1) == 4
    with pytest.raises(StakeNotFound):
        scores.calculate_launchpad_tier(2)


def test_launchpad_tiers_by_owner(scores, registry):
    """Test parallel per-stake tiers and multipliers in creation order."""
    registry.create_stake("alice", 100, 0, now=0)
    registry.create_stake("bob", 100, 0, now=0)
    registry.create_stake("alice", 2_000, 2, now=0)
    registry.create_stake("alice", 20_000, 4, now=0)
    tiers, multipliers = scores.get_launchpad_tiers_by_owner("alice")
    assert tiers == [0, 2, 4]
    assert multipliers == [1, 3, 5]
    assert scores.get_launchpad_tiers_by_owner("nobody") == ([], [])


def test_set_tier_score_applies_to_existing_stakes(scores, registry):
    """Test a new tier weight changes scores without re-depositing."""
    registry.create_stake("alice", 1_000, 3, now=0)
    registry.create_stake("alice", 1_000, 1, now=0)
    assert scores.get_total_score("alice") == 4_000 + 2_000
    scores.set_tier_score(3, 50)
    assert scores.get_total_score("alice") == 50_000 + 2_000
    assert scores.get_launchpad_tiers_by_owner("alice")[1] == [50, 2]


@pytest.mark.parametrize("tier_index", [-1, 5, 100, True])
def test_set_tier_score_invalid_index(scores, config, tier_index):
    before = list(config.tier_scores)
    with pytest.raises(InvalidTierIndex):
        scores.set_tier_score(tier_index, 7)
    assert config.tier_scores == before


def test_set_tier_score_invalid_value(scores):
    with pytest.raises(InvalidAmount):
        scores.set_tier_score(0, -1)
    with pytest.raises(InvalidAmount):
        scores.set_base_score_value(-5)


def test_zero_weight_tier(scores, registry):
    registry.create_stake("alice", 1_000_000, 0, now=0)
    scores.set_tier_score(0, 0)
    assert scores.get_total_score("alice") == 0
    assert scores.get_tier_by_owner("alice") == 0


def test_set_thresholds(scores, registry):
    registry.create_stake("alice", 1_000, 0, now=0)
    scores.set_tier_thresholds([10, 100, 1_000, 10_000])
    assert scores.get_tier_by_owner("alice") == 3


@pytest.mark.parametrize("values", [
    [1, 2, 3],
    [1, 2, 3, 4, 5],
    [1, 1, 2, 3],
    [5, 4, 3, 2],
    [-1, 2, 3, 4],
])
def test_set_thresholds_invalid(scores, config, values):
    before = list(config.launchpad_thresholds)
    with pytest.raises(InvalidConfiguration):
        scores.set_tier_thresholds(values)
    assert config.launchpad_thresholds == before


def test_score_overflow(scores, registry):
    registry.create_stake("alice", UINT256_MAX // 2, 4, now=0)
    with pytest.raises(Overflow):
        scores.get_total_score("alice")


def test_total_score_overflow_on_sum(scores, registry):
    registry.create_stake("alice", UINT256_MAX // 2 + 1, 0, now=0)
    registry.create_stake("alice", UINT256_MAX // 2 + 1, 0, now=0)
    with pytest.raises(Overflow):
        scores.get_total_score("alice")
