from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from packages.credits.models.domain.enums import (
    ReservationState,
    CreditTransactionType,
)


class CreditAccount(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    balance: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreditReservation(BaseModel):
    """Handle returned by ``CreditLedgerService.reserve``."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    user_id: str
    amount: int
    state: ReservationState
    created_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None


class CreditReservationCreateModel(BaseModel):
    id: str
    session_id: str
    user_id: str
    amount: int = Field(ge=0)
    state: ReservationState = ReservationState.HELD


class CreditTransaction(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    transaction_type: CreditTransactionType
    amount: int
    balance_after: int
    reservation_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class CreditTransactionCreateModel(BaseModel):
    user_id: str
    transaction_type: CreditTransactionType
    amount: int
    balance_after: int
    reservation_id: Optional[str] = None
    notes: Optional[str] = None
