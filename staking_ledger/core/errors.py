"""Errors raised by the staking engine."""


class StakingError(Exception):
    """Base class for all staking failures.

    A failed operation leaves the ledger unchanged, so callers may retry
    once the precondition is fixed.
    """
    code = "staking_error"


class AlreadyInitialized(StakingError):
    code = "already_initialized"


class InvalidAmount(StakingError):
    code = "invalid_amount"


class PoolNotOpen(StakingError):
    code = "pool_not_open"


class StakeNotFound(StakingError):
    code = "stake_not_found"


class Unauthorized(StakingError):
    code = "unauthorized"


class InvalidTransition(StakingError):
    code = "invalid_transition"


class StillLocked(StakingError):
    code = "still_locked"


class NothingToRestake(StakingError):
    code = "nothing_to_restake"


class InvalidTierIndex(StakingError):
    code = "invalid_tier_index"


class InvalidConfiguration(StakingError):
    code = "invalid_configuration"


class Overflow(StakingError):
    """Arithmetic left the unsigned 256-bit range."""
    code = "overflow"


class InsufficientRewardFunds(StakingError):
    code = "insufficient_reward_funds"


class TokenError(StakingError):
    """Failure reported by the token ledger."""
    code = "token_error"


class InsufficientBalance(TokenError):
    code = "insufficient_balance"


class InsufficientAllowance(TokenError):
    code = "insufficient_allowance"


class InvalidTimestamp(StakingError):
    code = "invalid_timestamp"


class CorruptState(StakingError):
    """Saved ledger state could not be read."""
    code = "corrupt_state"
