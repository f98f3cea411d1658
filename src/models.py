from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

# Digits to the right of the decimal point for every balance and amount.
SCALE = 4
QUANTUM = Decimal(1).scaleb(-SCALE)
ZERO = Decimal(0).quantize(QUANTUM)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


@dataclass(frozen=True)
class Record:
    """A single row of the input log, as read from the record source."""

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Record({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


class ProcessingStats:
    """Counters for the end of run report."""

    def __init__(self):
        self.records = 0
        self.applied = 0
        self.rejected = 0
        self.ignored = 0

    def record_applied(self):
        self.records += 1
        self.applied += 1

    def record_rejected(self):
        """Reached the account, which refused it (frozen, insufficient funds, bad amount)."""
        self.records += 1
        self.rejected += 1

    def record_ignored(self):
        """Dropped before reaching an account: nothing to correlate with."""
        self.records += 1
        self.ignored += 1

    def __repr__(self) -> str:
        return (
            f"ProcessingStats(records={self.records}, applied={self.applied}, "
            f"rejected={self.rejected}, ignored={self.ignored})"
        )
