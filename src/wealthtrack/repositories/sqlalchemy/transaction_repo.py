"""SQLAlchemy implementation of TransactionRepository."""

from sqlalchemy.orm import Session

from wealthtrack.domain.models import Transaction
from wealthtrack.repositories.sqlalchemy.orm_models import TransactionORM


class SqlAlchemyTransactionRepository:
    """SQLAlchemy-backed ledger store."""

    def __init__(self, db: Session):
        self._db = db

    def list_transactions(self) -> list[Transaction]:
        """List all transactions ordered by date (callers must not rely on it)."""
        rows = (
            self._db.query(TransactionORM)
            .order_by(TransactionORM.occurred_at, TransactionORM.txn_id)
            .all()
        )
        return [self._to_domain(row) for row in rows]

    def append_transaction(self, transaction: Transaction) -> Transaction:
        """Persist a new transaction."""
        orm_txn = TransactionORM(
            txn_id=transaction.txn_id,
            instrument_id=transaction.instrument_id,
            occurred_at=transaction.occurred_at,
            kind=transaction.kind,
            quantity=transaction.quantity,
            unit_price=transaction.unit_price,
            commission=transaction.commission,
            is_cash=transaction.is_cash,
            category=transaction.category,
        )
        self._db.add(orm_txn)
        self._db.commit()
        self._db.refresh(orm_txn)
        return self._to_domain(orm_txn)

    def remove_transaction(self, txn_id: str) -> bool:
        """Hard delete a transaction; return False when it did not exist."""
        deleted = (
            self._db.query(TransactionORM)
            .filter(TransactionORM.txn_id == txn_id)
            .delete()
        )
        self._db.commit()
        return deleted > 0

    @staticmethod
    def _to_domain(orm: TransactionORM) -> Transaction:
        """Convert ORM transaction to domain model."""
        return Transaction(
            txn_id=orm.txn_id,
            instrument_id=orm.instrument_id,
            occurred_at=orm.occurred_at,
            kind=orm.kind,
            quantity=float(orm.quantity),
            unit_price=float(orm.unit_price),
            commission=float(orm.commission or 0.0),
            is_cash=bool(orm.is_cash),
            category=orm.category,
        )
