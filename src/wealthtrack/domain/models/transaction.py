"""Transaction domain model."""

from dataclasses import dataclass
from datetime import date

from wealthtrack.domain.models.enums import TransactionKind


DEFAULT_CATEGORY = "Other"


@dataclass(frozen=True)
class Transaction:
    """
    Ledger transaction entry (source of truth).

    - is_cash=True: BUY is a deposit, SELL is a withdrawal of quantity * unit_price
    - is_cash=False: BUY/SELL of instrument_id; commission applies
    - Amounts are in the instrument's native currency
    - Immutable: corrections are new offsetting transactions
    """

    txn_id: str
    instrument_id: str
    occurred_at: date
    kind: TransactionKind
    quantity: float
    unit_price: float
    commission: float = 0.0
    is_cash: bool = False
    category: str = DEFAULT_CATEGORY

    def __post_init__(self) -> None:
        if isinstance(self.kind, str) and not isinstance(self.kind, TransactionKind):
            object.__setattr__(self, "kind", TransactionKind(self.kind.lower()))

    @property
    def gross_amount(self) -> float:
        """quantity * unit_price, before commission."""
        return self.quantity * self.unit_price

    @property
    def net_cash_impact(self) -> float:
        """
        Signed effect of this transaction on the cash balance.

        Positive = cash added, Negative = cash removed.
        """
        if self.is_cash:
            return self.gross_amount if self.kind == TransactionKind.BUY else -self.gross_amount
        if self.kind == TransactionKind.BUY:
            return -(self.gross_amount + self.commission)
        return self.gross_amount - self.commission
