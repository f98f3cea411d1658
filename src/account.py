import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Tuple

from models import ZERO

logger = logging.getLogger(__name__)


@dataclass
class Balance:
    """
    Funds of a single account.
    Every operation keeps total == available + held.
    Non-positive amounts are ignored.
    """

    available: Decimal = ZERO
    held: Decimal = ZERO
    total: Decimal = ZERO

    def deposit(self, amount: Decimal) -> bool:
        if amount <= 0:
            return False
        self.available += amount
        self.total += amount
        return True

    def withdraw(self, amount: Decimal) -> bool:
        # Withdrawing the exact available amount is rejected.
        if amount <= 0 or self.available <= amount:
            return False
        self.available -= amount
        self.total -= amount
        return True

    def dispute(self, amount: Decimal) -> bool:
        # available may go negative here.
        if amount <= 0:
            return False
        self.available -= amount
        self.held += amount
        return True

    def resolve(self, amount: Decimal) -> bool:
        if amount <= 0:
            return False
        self.available += amount
        self.held -= amount
        return True

    def chargeback(self, amount: Decimal) -> bool:
        if amount <= 0:
            return False
        self.held -= amount
        self.total -= amount
        return True


class AccountState(Enum):
    OPEN = "open"
    FROZEN = "frozen"


class Account:
    """
    Client account.
    Open accounts accept all operations (subject to the balance rules).
    A chargeback freezes the account for good; every operation on a frozen
    account is silently ignored.
    """

    def __init__(self):
        self._state = AccountState.OPEN
        self._balance = Balance()

    @property
    def state(self) -> AccountState:
        return self._state

    @property
    def locked(self) -> bool:
        return self._state is AccountState.FROZEN

    @property
    def balance(self) -> Balance:
        """Copy of the current balance."""
        return replace(self._balance)

    @property
    def available(self) -> Decimal:
        return self._balance.available

    @property
    def held(self) -> Decimal:
        return self._balance.held

    @property
    def total(self) -> Decimal:
        return self._balance.total

    def deposit(self, amount: Decimal) -> bool:
        return self._apply("deposit", amount)

    def withdraw(self, amount: Decimal) -> bool:
        return self._apply("withdraw", amount)

    def dispute(self, amount: Decimal) -> bool:
        return self._apply("dispute", amount)

    def resolve(self, amount: Decimal) -> bool:
        return self._apply("resolve", amount)

    def chargeback(self, amount: Decimal) -> bool:
        if not self._apply("chargeback", amount):
            return False
        self._balance = replace(self._balance)
        self._state = AccountState.FROZEN
        return True

    def _apply(self, operation: str, amount: Decimal) -> bool:
        if self._state is AccountState.FROZEN:
            logger.debug(f"{operation} of {amount} ignored: account is frozen")
            return False

        applied = getattr(self._balance, operation)(amount)
        if not applied:
            logger.debug(f"{operation} of {amount} rejected (available={self._balance.available})")
        return applied

    def __repr__(self) -> str:
        return f"Account({self._state.value}, {self._balance})"


@dataclass(order=True)
class Client:
    """A client id and its account. Compared and ordered by id only."""

    id: int
    account: Account = field(default_factory=Account, compare=False)

    def to_row(self) -> Tuple[int, Decimal, Decimal, Decimal, bool]:
        """Snapshot in output column order: client, available, held, total, locked."""
        return (
            self.id,
            self.account.available,
            self.account.held,
            self.account.total,
            self.account.locked,
        )
