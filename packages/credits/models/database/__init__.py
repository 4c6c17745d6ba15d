"""Database models for credits."""

from packages.credits.models.database.credit import (
    CreditAccountEntity,
    CreditReservationEntity,
    CreditTransactionEntity,
)

__all__ = [
    "CreditAccountEntity",
    "CreditReservationEntity",
    "CreditTransactionEntity",
]
