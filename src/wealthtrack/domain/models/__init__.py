"""Domain models package."""

from wealthtrack.domain.models.enums import (
    TransactionKind,
    CashEntryKind,
    PriceStatus,
    GoalStatus,
)
from wealthtrack.domain.models.transaction import Transaction, DEFAULT_CATEGORY
from wealthtrack.domain.models.holding import Holding
from wealthtrack.domain.models.cash import CashLedgerEntry, CashAccount, CashFlowSummary
from wealthtrack.domain.models.price import PriceSnapshot, PriceResolution
from wealthtrack.domain.models.valuation import MonthlyValuationPoint

__all__ = [
    "TransactionKind",
    "CashEntryKind",
    "PriceStatus",
    "GoalStatus",
    "Transaction",
    "DEFAULT_CATEGORY",
    "Holding",
    "CashLedgerEntry",
    "CashAccount",
    "CashFlowSummary",
    "PriceSnapshot",
    "PriceResolution",
    "MonthlyValuationPoint",
]
