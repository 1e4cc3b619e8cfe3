"""Ledger endpoints: list, append and remove transactions."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from wealthtrack.api.deps import get_ledger_service
from wealthtrack.api.schemas import (
    TransactionCreateRequest,
    TransactionListResponse,
    TransactionResponse,
)
from wealthtrack.services import LedgerService, TransactionCreate

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    instrument_id: Optional[str] = Query(None, description="Only this instrument"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    """List ledger transactions, oldest first."""
    transactions = ledger.list_transactions(
        instrument_id=instrument_id,
        start_date=start_date,
        end_date=end_date,
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        count=len(transactions),
    )


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    request: TransactionCreateRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """Append a transaction to the ledger."""
    transaction = ledger.add_transaction(
        TransactionCreate(
            instrument_id=request.instrument_id,
            kind=request.kind,
            occurred_at=request.occurred_at,
            quantity=request.quantity,
            unit_price=request.unit_price,
            commission=request.commission,
            is_cash=request.is_cash,
            category=request.category,
        )
    )
    return TransactionResponse.model_validate(transaction)


@router.delete("/{txn_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    txn_id: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> None:
    """Remove a transaction (corrections are normally new offsetting entries)."""
    ledger.remove_transaction(txn_id)
