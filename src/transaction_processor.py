import logging
from decimal import Decimal
from typing import Optional, Protocol

from account import Account
from models import Record, TransactionType
from state_manager import StateManager
from transaction import Completed, Received

logger = logging.getLogger(__name__)


class AmountLookup(Protocol):
    def find_amount(self, transaction_id: int) -> Optional[Decimal]:
        ...


class TransactionProcessor:
    """
    Drives a single record through the transaction state machine.
    Dispute amounts come from the record lookup, resolve and chargeback
    amounts from the dispute cache.
    """

    def __init__(self, state: StateManager, lookup: AmountLookup):
        self._state = state
        self._lookup = lookup

    def process_record(self, record: Record) -> Optional[Completed]:
        """
        Apply a single record to its client's account.

        Returns:
            Completed once the transaction reached the account, or None when a
            dispute, resolve or chargeback had nothing to correlate with.

        Raises:
            InvalidTransitionError: the record cannot legally reach Processing
                (e.g. a deposit without an amount).
        """
        account = self._state.get_or_create_client(record.client_id).account
        received = Received.from_record(record)

        match received.transaction_type:
            case TransactionType.DEPOSIT | TransactionType.WITHDRAWAL:
                return received.to_processing().process(account)
            case TransactionType.DISPUTE:
                return self._handle_dispute(account, received)
            case TransactionType.RESOLVE:
                return self._handle_resolve(account, received)
            case TransactionType.CHARGEBACK:
                return self._handle_chargeback(account, received)

    def _handle_dispute(self, account: Account, received: Received) -> Optional[Completed]:
        dispute_lookup = received.to_dispute_lookup()
        amount = self._lookup.find_amount(dispute_lookup.transaction_id)

        if amount is None:
            logger.info(f"Dispute for tx {dispute_lookup.transaction_id}: transaction not found, ignoring")
            return None

        dispute_lookup.set_amount(amount)
        completed = dispute_lookup.to_processing().process(account)
        if completed.applied:
            self._state.cache_dispute(dispute_lookup.transaction_id, amount)
        return completed

    def _handle_resolve(self, account: Account, received: Received) -> Optional[Completed]:
        resolved = received.to_resolved()
        amount = self._state.take_dispute(resolved.transaction_id)

        if amount is None:
            logger.info(f"Resolve for tx {resolved.transaction_id}: no outstanding dispute, ignoring")
            return None

        resolved.set_amount(amount)
        return resolved.to_processing().process(account)

    def _handle_chargeback(self, account: Account, received: Received) -> Optional[Completed]:
        charged_back = received.to_charged_back()
        amount = self._state.take_dispute(charged_back.transaction_id)

        if amount is None:
            logger.info(f"Chargeback for tx {charged_back.transaction_id}: no outstanding dispute, ignoring")
            return None

        charged_back.set_amount(amount)
        return charged_back.to_processing().process(account)
