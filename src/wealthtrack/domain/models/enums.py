"""Enumerations for domain models."""

from enum import Enum


class TransactionKind(str, Enum):
    """Direction of a ledger transaction."""

    BUY = "buy"
    SELL = "sell"


class CashEntryKind(str, Enum):
    """Kinds of movements in the derived cash ledger."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    PURCHASE = "purchase"
    SALE = "sale"


class PriceStatus(str, Enum):
    """Outcome of resolving one instrument's current price."""

    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


class GoalStatus(str, Enum):
    """Outcome of a goal projection."""

    ACHIEVED = "achieved"
    PROJECTED = "projected"
    UNREACHABLE = "unreachable"
