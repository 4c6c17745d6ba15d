"""
API schemas for credit endpoints.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from packages.credits.models.domain.enums import CreditTransactionType


class CreditBalanceResponse(BaseModel):
    balance: int


class CreditTransactionResponse(BaseModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )

    id: int
    transaction_type: CreditTransactionType
    amount: int
    balance_after: int
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class CreditTransactionListResponse(BaseModel):
    transactions: List[CreditTransactionResponse]
    total: int
