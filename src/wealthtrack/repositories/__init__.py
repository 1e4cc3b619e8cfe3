"""Repositories: ledger and price-cache stores."""

from wealthtrack.repositories.memory import InMemoryTransactionRepository, InMemoryPriceStore

__all__ = [
    "InMemoryTransactionRepository",
    "InMemoryPriceStore",
]
