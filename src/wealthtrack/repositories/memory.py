"""In-memory repository implementations (tests, offline use)."""

from typing import Mapping, Optional

from wealthtrack.domain.models import PriceSnapshot, Transaction


class InMemoryTransactionRepository:
    """Dict-backed ledger store preserving insertion order."""

    def __init__(self, transactions: Optional[list[Transaction]] = None):
        self._transactions: dict[str, Transaction] = {}
        for txn in transactions or []:
            self.append_transaction(txn)

    def list_transactions(self) -> list[Transaction]:
        return list(self._transactions.values())

    def append_transaction(self, transaction: Transaction) -> Transaction:
        self._transactions[transaction.txn_id] = transaction
        return transaction

    def remove_transaction(self, txn_id: str) -> bool:
        return self._transactions.pop(txn_id, None) is not None


class InMemoryPriceStore:
    """Dict-backed price snapshot store."""

    def __init__(self):
        self._snapshots: dict[str, PriceSnapshot] = {}

    def get(self, instrument_id: str) -> Optional[PriceSnapshot]:
        return self._snapshots.get(instrument_id)

    def put_many(self, snapshots: Mapping[str, PriceSnapshot]) -> None:
        # Single dict update so readers never see a half-written batch
        self._snapshots = {**self._snapshots, **snapshots}

    def clear(self) -> None:
        self._snapshots = {}
