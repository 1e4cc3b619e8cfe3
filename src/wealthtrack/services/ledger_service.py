"""Ledger service for transaction management."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Optional

from wealthtrack.core.exceptions import NotFoundError, ValidationError
from wealthtrack.core.timezone import now_local
from wealthtrack.domain.models import Transaction, TransactionKind
from wealthtrack.domain.models.transaction import DEFAULT_CATEGORY
from wealthtrack.repositories.protocols import TransactionRepository
from wealthtrack.services.ledger_replayer import validate_transaction

logger = logging.getLogger(__name__)


@dataclass
class TransactionCreate:
    """Input data for creating a transaction."""

    instrument_id: str
    kind: TransactionKind
    quantity: float
    unit_price: float
    occurred_at: Optional[date] = None
    commission: float = 0.0
    is_cash: bool = False
    category: str = DEFAULT_CATEGORY


class LedgerService:
    """
    Service for managing the transaction ledger.

    The ledger is append-only: transactions are added or removed, never edited.
    Corrections are recorded as new offsetting transactions.
    """

    def __init__(self, transaction_repo: TransactionRepository):
        self._transaction_repo = transaction_repo

    def add_transaction(self, data: TransactionCreate) -> Transaction:
        """Validate and append a new transaction."""
        instrument_id = (data.instrument_id or "").strip().upper()
        if not instrument_id:
            raise ValidationError("instrument_id is required")

        transaction = Transaction(
            txn_id=str(uuid.uuid4()),
            instrument_id=instrument_id,
            occurred_at=data.occurred_at or now_local().date(),
            kind=data.kind,
            quantity=data.quantity,
            unit_price=data.unit_price,
            commission=data.commission or 0.0,
            is_cash=data.is_cash,
            category=data.category or DEFAULT_CATEGORY,
        )
        validate_transaction(transaction)

        created = self._transaction_repo.append_transaction(transaction)
        logger.info(
            "Added %s %s %s x %s",
            created.kind.value, created.instrument_id, created.quantity, created.unit_price,
        )
        return created

    def remove_transaction(self, txn_id: str) -> None:
        """Remove a transaction from the ledger."""
        if not self._transaction_repo.remove_transaction(txn_id):
            raise NotFoundError("Transaction", txn_id)
        logger.info("Removed transaction %s", txn_id)

    def list_transactions(
        self,
        instrument_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions, oldest first, with optional filters."""
        transactions = self._transaction_repo.list_transactions()
        if instrument_id:
            instrument_id = instrument_id.strip().upper()
            transactions = [t for t in transactions if t.instrument_id == instrument_id]
        if start_date:
            transactions = [t for t in transactions if t.occurred_at >= start_date]
        if end_date:
            transactions = [t for t in transactions if t.occurred_at <= end_date]
        return sorted(transactions, key=lambda t: (t.occurred_at, t.txn_id))
