from decimal import Decimal
from typing import Dict, Optional

from account import Client


class StateManager:
    """
    State owned by a single run.
    Holds the client map and the dispute cache (tx id -> disputed amount).
    """

    def __init__(self):
        self._clients: Dict[int, Client] = {}
        self._disputes: Dict[int, Decimal] = {}

    def get_or_create_client(self, client_id: int) -> Client:
        """Get existing client or create one with a zero balance."""
        if client_id not in self._clients:
            self._clients[client_id] = Client(client_id)
        return self._clients[client_id]

    def cache_dispute(self, transaction_id: int, amount: Decimal) -> None:
        """Remember the amount held by a successful dispute."""
        self._disputes[transaction_id] = amount

    def take_dispute(self, transaction_id: int) -> Optional[Decimal]:
        """Remove and return the disputed amount, or None when nothing is outstanding."""
        return self._disputes.pop(transaction_id, None)

    def is_transaction_disputed(self, transaction_id: int) -> bool:
        """Check if transaction has an outstanding dispute."""
        return transaction_id in self._disputes

    def get_all_clients(self) -> Dict[int, Client]:
        """Return all clients (for final output)."""
        return dict(self._clients)
