import logging
from typing import Dict, Iterable

from account import Client
from models import ProcessingStats, Record
from record_source import IndexedLookup, RecordSource, ScanLookup
from state_manager import StateManager
from transaction_processor import AmountLookup, TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Applies a transaction log to client accounts, one record at a time in file order.
    Malformed rows and illegal state transitions abort the run.
    """

    def __init__(self, indexed_lookup: bool = True):
        self._indexed_lookup = indexed_lookup
        self._state = StateManager()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, Client]:
        """Process CSV file and return final client states."""
        # The lookup gets its own handle so scanning never moves the primary stream.
        with RecordSource.open(filepath) as records, RecordSource.open(filepath) as search_records:
            return self.run(records, self._make_lookup(search_records))

    def run(self, records: Iterable[Record], lookup: AmountLookup) -> Dict[int, Client]:
        """Apply every record in order and return final client states."""
        processor = TransactionProcessor(self._state, lookup)

        logger.info("Starting processing")
        for record in records:
            completed = processor.process_record(record)
            if completed is None:
                self._stats.record_ignored()
            elif completed.applied:
                self._stats.record_applied()
            else:
                self._stats.record_rejected()

        logger.info(
            f"Processed: {self._stats.records}, "
            f"Applied: {self._stats.applied}, "
            f"Rejected: {self._stats.rejected}, "
            f"Ignored: {self._stats.ignored}"
        )
        return self._state.get_all_clients()

    def _make_lookup(self, search_records: RecordSource) -> AmountLookup:
        if self._indexed_lookup:
            return IndexedLookup(search_records)
        return ScanLookup(search_records)
