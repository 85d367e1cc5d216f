"""Reward pool funding state."""
from loguru import logger
from pydantic import BaseModel

from .errors import AlreadyInitialized, InsufficientRewardFunds, InvalidAmount, PoolNotOpen
from .uint import checked_add, is_uint


class RewardPoolState(BaseModel):
    """Persisted reward pool fields."""
    is_open: bool = False
    funded_amount: int = 0


class RewardPool:
    """Budget available for reward payout; staking is closed until funded."""

    def __init__(self, state: RewardPoolState = None):
        self.state = state or RewardPoolState()

    @property
    def is_open(self) -> bool:
        return self.state.is_open

    @property
    def funded_amount(self) -> int:
        return self.state.funded_amount

    def check_initialize(self, amount: int) -> None:
        """Raise unless `initialize(amount)` would succeed."""
        if self.state.is_open:
            raise AlreadyInitialized("Reward pool is already initialized")
        if not is_uint(amount) or amount == 0:
            raise InvalidAmount(f"Initial funding must be positive, got {amount!r}")

    def initialize(self, amount: int) -> None:
        self.check_initialize(amount)
        self.state.funded_amount = amount
        self.state.is_open = True
        logger.info(f"Reward pool opened with {amount}")

    def ensure_open(self) -> None:
        if not self.state.is_open:
            raise PoolNotOpen("Reward pool has not been initialized")

    def check_fund(self, amount: int) -> None:
        self.ensure_open()
        if not is_uint(amount) or amount == 0:
            raise InvalidAmount(f"Funding must be positive, got {amount!r}")
        checked_add(self.state.funded_amount, amount)

    def fund(self, amount: int) -> None:
        """Top up an open pool."""
        self.check_fund(amount)
        self.state.funded_amount += amount
        logger.info(f"Reward pool topped up by {amount}, now {self.state.funded_amount}")

    def check_pay_out(self, amount: int) -> None:
        if amount > self.state.funded_amount:
            raise InsufficientRewardFunds(
                f"Reward {amount} exceeds pool budget {self.state.funded_amount}"
            )

    def pay_out(self, amount: int) -> None:
        """Draw `amount` from the reward budget."""
        self.check_pay_out(amount)
        self.state.funded_amount -= amount
