"""
Ledger replayer: derive holdings and the cash ledger from transactions.

The ledger is the source of truth. Holdings and cash are always recomputed by
replaying it in chronological order; nothing here is persisted.
"""

import logging
import math
import uuid
from datetime import date
from typing import Iterable, Mapping, Optional, Union

from wealthtrack.core.exceptions import ValidationError
from wealthtrack.core.timezone import parse_date
from wealthtrack.domain.models import (
    CashAccount,
    CashEntryKind,
    CashFlowSummary,
    CashLedgerEntry,
    Holding,
    Transaction,
    TransactionKind,
)
from wealthtrack.domain.models.holding import QUANTITY_EPSILON
from wealthtrack.domain.models.transaction import DEFAULT_CATEGORY

logger = logging.getLogger(__name__)

CASH_CATEGORY = "Cash"
_TRUE_STRINGS = {"true", "1", "yes", "y"}

LedgerRecord = Union[Transaction, Mapping]


def _number(value, field: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be numeric, got {value!r}")
    if math.isnan(result) or math.isinf(result):
        raise ValidationError(f"{field} must be finite, got {value!r}")
    return result


def _flag(value) -> bool:
    """Legacy exports carry booleans as strings ("false", "0")."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def is_cash_record(raw: Mapping) -> bool:
    """Explicit isCash flag wins; otherwise a "Cash" macro category or category."""
    for key in ("isCash", "is_cash"):
        if raw.get(key) is not None:
            return _flag(raw[key])
    return CASH_CATEGORY in (raw.get("macroCategory"), raw.get("category"))


def normalize_record(raw: Mapping) -> Transaction:
    """
    Build a Transaction from a loosely typed ledger record.

    Accepts both the current field names (instrument_id, kind, occurred_at,
    unit_price) and the legacy ones (ticker, type, date, price, macroCategory).
    Raises ValidationError when a required field is missing or unusable.
    """
    instrument_id = (raw.get("instrument_id") or raw.get("ticker") or "").strip().upper()
    if not instrument_id:
        raise ValidationError("instrument_id is required")

    try:
        occurred_at = parse_date(raw.get("occurred_at") or raw.get("date"))
    except (ValueError, OverflowError) as exc:
        raise ValidationError(f"invalid date: {exc}")
    if occurred_at is None:
        raise ValidationError("date is required")

    kind_value = str(raw.get("kind") or raw.get("type") or "").strip().lower()
    try:
        kind = TransactionKind(kind_value)
    except ValueError:
        raise ValidationError(f"unknown transaction kind {kind_value!r}")

    unit_price = raw.get("unit_price", raw.get("price"))
    category = raw.get("category") or raw.get("macroCategory") or DEFAULT_CATEGORY

    transaction = Transaction(
        txn_id=str(raw.get("txn_id") or raw.get("id") or uuid.uuid4()),
        instrument_id=instrument_id,
        occurred_at=occurred_at,
        kind=kind,
        quantity=_number(raw.get("quantity"), "quantity"),
        unit_price=_number(unit_price, "unit_price"),
        commission=_number(raw.get("commission") or 0, "commission"),
        is_cash=is_cash_record(raw),
        category=str(category),
    )
    validate_transaction(transaction)
    return transaction


def validate_transaction(transaction: Transaction) -> None:
    """Raise ValidationError unless the transaction can be replayed."""
    if not isinstance(transaction.occurred_at, date):
        raise ValidationError("occurred_at must be a date")
    if not isinstance(transaction.kind, TransactionKind):
        raise ValidationError(f"unknown transaction kind {transaction.kind!r}")
    quantity = _number(transaction.quantity, "quantity")
    unit_price = _number(transaction.unit_price, "unit_price")
    commission = _number(transaction.commission, "commission")
    if quantity <= 0:
        raise ValidationError("quantity must be positive")
    if unit_price < 0:
        raise ValidationError("unit_price cannot be negative")
    if commission < 0:
        raise ValidationError("commission cannot be negative")


class LedgerReplayer:
    """
    Replays a ledger into holdings, a cash ledger and cash-flow totals.

    Cost basis uses the weighted-average method: a sale reduces total cost by
    quantity * average price at the time of sale, never by the proceeds.
    Malformed records are skipped and reported in `warnings`.
    """

    def __init__(self):
        self.warnings: list[str] = []

    def prepare(self, ledger: Iterable[LedgerRecord]) -> list[Transaction]:
        """Validate and chronologically sort the ledger; input order is irrelevant."""
        self.warnings = []
        valid: list[Transaction] = []
        for record in ledger:
            try:
                if isinstance(record, Transaction):
                    validate_transaction(record)
                    valid.append(record)
                else:
                    valid.append(normalize_record(record))
            except (ValidationError, AttributeError, TypeError) as exc:
                txn_id = getattr(record, "txn_id", None)
                if txn_id is None and isinstance(record, Mapping):
                    txn_id = record.get("txn_id") or record.get("id")
                message = f"Skipped transaction {txn_id or '?'}: {exc}"
                self.warnings.append(message)
                logger.warning(message)
        return sorted(valid, key=lambda t: (t.occurred_at, t.txn_id))

    def holdings_as_of(
        self,
        ledger: Iterable[LedgerRecord],
        cutoff: Optional[date] = None,
    ) -> dict[str, Holding]:
        """Open positions (quantity > 0) after replaying everything up to cutoff."""
        holdings: dict[str, Holding] = {}
        for txn in self._until(self.prepare(ledger), cutoff):
            if txn.is_cash:
                continue
            holding = holdings.setdefault(txn.instrument_id, Holding(txn.instrument_id))
            # Most recent transaction decides the category label
            holding.category = txn.category or holding.category
            if txn.kind == TransactionKind.BUY:
                holding.quantity += txn.quantity
                holding.total_cost += txn.gross_amount + txn.commission
            else:
                avg_price = holding.avg_price
                holding.quantity -= txn.quantity
                holding.total_cost -= txn.quantity * avg_price
                if abs(holding.quantity) <= QUANTITY_EPSILON:
                    holding.quantity = 0.0
                if holding.quantity <= QUANTITY_EPSILON:
                    holding.total_cost = 0.0

        return {
            instrument_id: holding
            for instrument_id, holding in sorted(holdings.items())
            if holding.is_open
        }

    def cash_ledger(
        self,
        ledger: Iterable[LedgerRecord],
        cutoff: Optional[date] = None,
    ) -> list[CashLedgerEntry]:
        """Signed cash movements in chronological order with running balance."""
        entries: list[CashLedgerEntry] = []
        balance = 0.0
        for txn in self._until(self.prepare(ledger), cutoff):
            amount = txn.net_cash_impact
            balance += amount
            entries.append(
                CashLedgerEntry(
                    date=txn.occurred_at,
                    amount=amount,
                    kind=_cash_entry_kind(txn),
                    instrument_id=txn.instrument_id,
                    balance=balance,
                )
            )
        return entries

    def cash_flow_summary(self, ledger: Iterable[LedgerRecord]) -> CashFlowSummary:
        """Deposits, withdrawals, purchases and sales over the whole ledger."""
        summary = CashFlowSummary()
        accounts: dict[str, CashAccount] = {}
        for entry in self.cash_ledger(ledger):
            if entry.kind == CashEntryKind.DEPOSIT:
                summary.deposits += entry.amount
                account = accounts.setdefault(entry.instrument_id, CashAccount(entry.instrument_id))
                account.deposits += entry.amount
            elif entry.kind == CashEntryKind.WITHDRAWAL:
                summary.withdrawals -= entry.amount
                account = accounts.setdefault(entry.instrument_id, CashAccount(entry.instrument_id))
                account.withdrawals -= entry.amount
            elif entry.kind == CashEntryKind.PURCHASE:
                summary.purchases -= entry.amount
            else:
                summary.sales += entry.amount
            summary.movements.append(entry)
        summary.accounts = [accounts[name] for name in sorted(accounts)]
        return summary

    @staticmethod
    def _until(transactions: list[Transaction], cutoff: Optional[date]) -> list[Transaction]:
        if cutoff is None:
            return transactions
        return [t for t in transactions if t.occurred_at <= cutoff]


def _cash_entry_kind(txn: Transaction) -> CashEntryKind:
    if txn.is_cash:
        return CashEntryKind.DEPOSIT if txn.kind == TransactionKind.BUY else CashEntryKind.WITHDRAWAL
    return CashEntryKind.PURCHASE if txn.kind == TransactionKind.BUY else CashEntryKind.SALE
