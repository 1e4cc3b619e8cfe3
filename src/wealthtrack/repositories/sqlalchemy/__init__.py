"""SQLAlchemy repository implementations."""

from wealthtrack.repositories.sqlalchemy.transaction_repo import SqlAlchemyTransactionRepository
from wealthtrack.repositories.sqlalchemy.price_store import SqlAlchemyPriceStore

__all__ = [
    "SqlAlchemyTransactionRepository",
    "SqlAlchemyPriceStore",
]
