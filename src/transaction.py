"""
Transaction state machine.

Every record enters as Received and is converted, one legal step at a time,
into Processing, which applies it to an account and yields Completed:

    Received --(deposit|withdrawal)--> Processing
    Received --(dispute)-->    DisputeLookup --> Processing
    Received --(resolve)-->    Resolved      --> Processing
    Received --(chargeback)--> ChargedBack   --> Processing
    Processing --process(account)--> Completed

Illegal conversions raise InvalidTransitionError.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from account import Account
from models import Record, TransactionType

logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    def __init__(self, source: str, target: str):
        super().__init__(f"Invalid state transition from {source} to {target}")
        self.source = source
        self.target = target


@dataclass(frozen=True)
class Completed:
    """Terminal state. The transaction has already been applied (or rejected by the account)."""

    transaction_type: TransactionType
    amount: Decimal
    applied: bool


@dataclass(frozen=True)
class Processing:
    """A transaction with a resolved amount, ready to apply."""

    transaction_type: TransactionType
    amount: Decimal

    def process(self, account: Account) -> Completed:
        match self.transaction_type:
            case TransactionType.DEPOSIT:
                applied = account.deposit(self.amount)
            case TransactionType.WITHDRAWAL:
                applied = account.withdraw(self.amount)
            case TransactionType.DISPUTE:
                applied = account.dispute(self.amount)
            case TransactionType.RESOLVE:
                applied = account.resolve(self.amount)
            case TransactionType.CHARGEBACK:
                applied = account.chargeback(self.amount)
            case _:
                raise InvalidTransitionError(type(self).__name__, Completed.__name__)

        return Completed(self.transaction_type, self.amount, applied)


class _AwaitingAmount:
    """Base for the states whose amount is recovered from elsewhere."""

    transaction_type: TransactionType

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        self.amount: Optional[Decimal] = None

    def set_amount(self, amount: Optional[Decimal]) -> None:
        self.amount = amount

    def to_processing(self) -> Processing:
        if self.amount is None:
            raise InvalidTransitionError(type(self).__name__, Processing.__name__)
        return Processing(self.transaction_type, self.amount)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tx={self.transaction_id}, amount={self.amount})"


class DisputeLookup(_AwaitingAmount):
    """Disputed transaction needs to be looked up for the amount to hold."""

    transaction_type = TransactionType.DISPUTE


class Resolved(_AwaitingAmount):
    """Dispute is resolved; the held amount comes from the dispute cache."""

    transaction_type = TransactionType.RESOLVE


class ChargedBack(_AwaitingAmount):
    """Dispute is charged back; the held amount comes from the dispute cache."""

    transaction_type = TransactionType.CHARGEBACK


@dataclass(frozen=True)
class Received:
    """Entry state, built from an input record."""

    transaction_type: TransactionType
    transaction_id: int
    amount: Optional[Decimal] = None

    @classmethod
    def from_record(cls, record: Record) -> "Received":
        return cls(record.transaction_type, record.transaction_id, record.amount)

    def to_processing(self) -> Processing:
        if self.transaction_type not in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL):
            raise InvalidTransitionError(type(self).__name__, self.transaction_type.name)
        if self.amount is None:
            raise InvalidTransitionError(type(self).__name__, Processing.__name__)
        logger.debug(f"{self} -> Processing")
        return Processing(self.transaction_type, self.amount)

    def to_dispute_lookup(self) -> DisputeLookup:
        self._expect(TransactionType.DISPUTE)
        return DisputeLookup(self.transaction_id)

    def to_resolved(self) -> Resolved:
        self._expect(TransactionType.RESOLVE)
        return Resolved(self.transaction_id)

    def to_charged_back(self) -> ChargedBack:
        self._expect(TransactionType.CHARGEBACK)
        return ChargedBack(self.transaction_id)

    def _expect(self, transaction_type: TransactionType) -> None:
        if self.transaction_type is not transaction_type:
            raise InvalidTransitionError(type(self).__name__, self.transaction_type.name)
