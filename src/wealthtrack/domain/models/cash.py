"""Cash ledger models derived from transactions."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from wealthtrack.domain.models.enums import CashEntryKind


@dataclass(frozen=True)
class CashLedgerEntry:
    """One signed cash movement; balance is the running total after it."""

    date: date
    amount: float
    kind: CashEntryKind
    instrument_id: Optional[str] = None
    balance: float = 0.0


@dataclass
class CashAccount:
    """Deposits and withdrawals grouped by cash-account identifier."""

    name: str
    deposits: float = 0.0
    withdrawals: float = 0.0

    @property
    def balance(self) -> float:
        return self.deposits - self.withdrawals


@dataclass
class CashFlowSummary:
    """Totals of every kind of cash movement over the whole ledger."""

    deposits: float = 0.0
    withdrawals: float = 0.0
    purchases: float = 0.0
    sales: float = 0.0
    accounts: list[CashAccount] = field(default_factory=list)
    movements: list[CashLedgerEntry] = field(default_factory=list)

    @property
    def available_cash(self) -> float:
        return self.deposits - self.withdrawals - self.purchases + self.sales

    @property
    def total_inflows(self) -> float:
        return self.deposits + self.sales

    @property
    def total_outflows(self) -> float:
        return self.withdrawals + self.purchases

    def recent_movements(self, limit: int = 10) -> list[CashLedgerEntry]:
        """Most recent movements first."""
        return list(reversed(self.movements[-limit:])) if limit > 0 else []
