"""Fungible token ledger used for custody of staked funds."""
from abc import ABC, abstractmethod
from typing import Dict

from loguru import logger

from .errors import InsufficientAllowance, InsufficientBalance, InvalidAmount
from .uint import checked_add, is_uint


class TokenLedger(ABC):
    """Capability interface to an external fungible token.

    The staking engine only moves tokens through these calls; it never
    holds balances itself.
    """

    @abstractmethod
    def balance_of(self, account: str) -> int:
        """Get token balance of an account."""
        pass

    @abstractmethod
    def allowance(self, owner: str, spender: str) -> int:
        """Get amount `spender` may move on behalf of `owner`."""
        pass

    @abstractmethod
    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Allow `spender` to move up to `amount` of `owner`'s tokens."""
        pass

    @abstractmethod
    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move tokens out of `sender`'s own balance."""
        pass

    @abstractmethod
    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        """Move tokens from `owner` to `recipient` using `spender`'s allowance."""
        pass


class InMemoryTokenLedger(TokenLedger):
    """Dictionary-backed token ledger for local runs and tests."""

    def __init__(self, balances: Dict[str, int] = None,
                 allowances: Dict[str, Dict[str, int]] = None):
        self.balances: Dict[str, int] = dict(balances or {})
        self.allowances: Dict[str, Dict[str, int]] = {
            owner: dict(spenders) for owner, spenders in (allowances or {}).items()
        }

    def mint(self, account: str, amount: int) -> None:
        """Credit new tokens to an account."""
        if not is_uint(amount) or amount == 0:
            raise InvalidAmount(f"Cannot mint {amount!r}")
        self.balances[account] = checked_add(self.balances.get(account, 0), amount)
        logger.debug(f"Minted {amount} to {account}")

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get(owner, {}).get(spender, 0)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        if not is_uint(amount):
            raise InvalidAmount(f"Cannot approve {amount!r}")
        self.allowances.setdefault(owner, {})[spender] = amount
        logger.debug(f"{owner} approved {spender} for {amount}")

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        self._check_balance(sender, amount)
        self._move(sender, recipient, amount)

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{spender} may move {allowed} from {owner}, needs {amount}"
            )
        self._check_balance(owner, amount)
        self.allowances[owner][spender] = allowed - amount
        self._move(owner, recipient, amount)

    def _check_balance(self, account: str, amount: int) -> None:
        if not is_uint(amount):
            raise InvalidAmount(f"Cannot transfer {amount!r}")
        balance = self.balance_of(account)
        if balance < amount:
            raise InsufficientBalance(f"{account} holds {balance}, needs {amount}")

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        self.balances[sender] = self.balance_of(sender) - amount
        self.balances[recipient] = self.balance_of(recipient) + amount
        logger.debug(f"Transferred {amount} from {sender} to {recipient}")
