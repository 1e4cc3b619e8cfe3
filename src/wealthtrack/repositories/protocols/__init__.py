"""Repository protocol definitions (interfaces)."""

from wealthtrack.repositories.protocols.transaction_repo import TransactionRepository
from wealthtrack.repositories.protocols.price_store import PriceStore

__all__ = [
    "TransactionRepository",
    "PriceStore",
]
