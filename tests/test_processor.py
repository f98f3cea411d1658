import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import Record, TransactionType
from state_manager import StateManager
from transaction import InvalidTransitionError
from transaction_processor import TransactionProcessor


class DictLookup:
    """Record lookup over the records processed so far."""

    def __init__(self):
        self.amounts = {}

    def find_amount(self, transaction_id):
        return self.amounts.get(transaction_id)


class TestTransactionProcessor:
    def setup_method(self):
        self.state = StateManager()
        self.lookup = DictLookup()
        self.processor = TransactionProcessor(self.state, self.lookup)

    def process(self, transaction_type, client_id, transaction_id, amount=None):
        record = Record(transaction_type, client_id, transaction_id, Decimal(amount) if amount else None)
        if record.amount is not None:
            self.lookup.amounts.setdefault(transaction_id, record.amount)
        return self.processor.process_record(record)

    def account(self, client_id=1):
        return self.state.get_or_create_client(client_id).account

    def test_deposit(self):
        completed = self.process(TransactionType.DEPOSIT, 1, 1, "100")

        assert completed.applied is True
        assert self.account().available == Decimal("100")
        assert self.account().total == Decimal("100")

    def test_withdrawal_success(self):
        self.process(TransactionType.DEPOSIT, 1, 1, "100")
        completed = self.process(TransactionType.WITHDRAWAL, 1, 2, "60")

        assert completed.applied is True
        assert self.account().available == Decimal("40")

    def test_withdrawal_insufficient_funds(self):
        self.process(TransactionType.DEPOSIT, 1, 1, "50")
        completed = self.process(TransactionType.WITHDRAWAL, 1, 2, "100")

        assert completed.applied is False
        assert self.account().available == Decimal("50")

    def test_deposit_without_amount_is_fatal(self):
        with pytest.raises(InvalidTransitionError):
            self.process(TransactionType.DEPOSIT, 1, 1)

    def test_dispute(self):
        self.process(TransactionType.DEPOSIT, 1, 1, "100")
        completed = self.process(TransactionType.DISPUTE, 1, 1)

        assert completed.applied is True
        assert self.account().available == Decimal("0")
        assert self.account().held == Decimal("100")
        assert self.account().total == Decimal("100")
        assert self.state.is_transaction_disputed(1)

    def test_dispute_tx_not_found(self):
        completed = self.process(TransactionType.DISPUTE, 1, 99)

        assert completed is None
        assert self.account().total == Decimal("0")
        assert not self.state.is_transaction_disputed(99)

    def test_dispute_on_frozen_account_not_cached(self):
        self.process(TransactionType.DEPOSIT, 1, 1, "100")
        self.process(TransactionType.DEPOSIT, 1, 2, "10")
        self.process(TransactionType.DISPUTE, 1, 1)
        self.process(TransactionType.CHARGEBACK, 1, 1)

        completed = self.process(TransactionType.DISPUTE, 1, 2)

        assert completed.applied is False
        assert not self.state.is_transaction_disputed(2)

    def test_resolve(self):
        self.process(TransactionType.DEPOSIT, 1, 1, "100")
        self.process(TransactionType.DISPUTE, 1, 1)
        completed = self.process(TransactionType.RESOLVE, 1, 1)

        assert completed.applied is True
        assert self.account().available == Decimal("100")
        assert self.account().held == Decimal("0")
        assert not self.state.is_transaction_disputed(1)

    def test_resolve_not_disputed(self):
        self.process(TransactionType.DEPOSIT, 1, 1, "100")
        completed = self.process(TransactionType.RESOLVE, 1, 1)

        assert completed is None
        assert self.account().available == Decimal("100")

    def test_chargeback(self):
        self.process(TransactionType.DEPOSIT, 1, 1, "100")
        self.process(TransactionType.DISPUTE, 1, 1)
        completed = self.process(TransactionType.CHARGEBACK, 1, 1)

        assert completed.applied is True
        account = self.account()
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is True

    def test_second_resolve_or_chargeback_is_noop(self):
        self.process(TransactionType.DEPOSIT, 1, 1, "100")
        self.process(TransactionType.DISPUTE, 1, 1)
        self.process(TransactionType.RESOLVE, 1, 1)

        assert self.process(TransactionType.RESOLVE, 1, 1) is None
        assert self.process(TransactionType.CHARGEBACK, 1, 1) is None
        assert self.account().available == Decimal("100")
        assert self.account().locked is False

    def test_frozen_account_rejects_operations(self):
        self.process(TransactionType.DEPOSIT, 1, 1, "100")
        self.process(TransactionType.DISPUTE, 1, 1)
        self.process(TransactionType.CHARGEBACK, 1, 1)

        completed = self.process(TransactionType.DEPOSIT, 1, 2, "50")
        assert completed.applied is False
        assert self.account().total == Decimal("0")

    def test_unseen_client_created(self):
        self.process(TransactionType.RESOLVE, 7, 1)

        clients = self.state.get_all_clients()
        assert list(clients) == [7]
        assert clients[7].account.total == Decimal("0")


class TestStateManager:
    def test_get_or_create_client_returns_same_client(self):
        state = StateManager()
        client = state.get_or_create_client(3)
        client.account.deposit(Decimal("1"))

        assert state.get_or_create_client(3) is client

    def test_take_dispute_removes_entry(self):
        state = StateManager()
        state.cache_dispute(5, Decimal("2"))

        assert state.take_dispute(5) == Decimal("2")
        assert state.take_dispute(5) is None
