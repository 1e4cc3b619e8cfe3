"""Transaction repository protocol."""

from typing import Protocol

from wealthtrack.domain.models import Transaction


class TransactionRepository(Protocol):
    """Interface for the ledger store (any CRUD backend)."""

    def list_transactions(self) -> list[Transaction]:
        """List all transactions, in any order."""
        ...

    def append_transaction(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""
        ...

    def remove_transaction(self, txn_id: str) -> bool:
        """Remove a transaction; return False when it did not exist."""
        ...
