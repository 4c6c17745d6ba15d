"""
Credit API routes.

Read-only views of the caller's balance and transaction history.
"""

from fastapi import APIRouter, Depends, Query

from packages.auth.dependencies import get_current_active_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.credits.services.ledger_service import CreditLedgerService
from packages.credits.models.schemas.credits import (
    CreditBalanceResponse,
    CreditTransactionListResponse,
    CreditTransactionResponse,
)

router = APIRouter()


def get_ledger_service() -> CreditLedgerService:
    return CreditLedgerService()


@router.get("/balance", response_model=CreditBalanceResponse)
async def get_balance(
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    ledger: CreditLedgerService = Depends(get_ledger_service),
):
    balance = await ledger.get_balance(current_user.user_id)
    return CreditBalanceResponse(balance=balance)


@router.get("/transactions", response_model=CreditTransactionListResponse)
async def list_transactions(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: AuthenticatedUser = Depends(get_current_active_user),
    ledger: CreditLedgerService = Depends(get_ledger_service),
):
    """Transaction history, newest first."""
    transactions, total = await ledger.get_transactions(
        current_user.user_id, limit=limit, offset=offset
    )
    return CreditTransactionListResponse(
        transactions=[
            CreditTransactionResponse.model_validate(tx) for tx in transactions
        ],
        total=total,
    )
