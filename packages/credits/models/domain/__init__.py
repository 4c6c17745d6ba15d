"""Domain models for credits."""

from packages.credits.models.domain.enums import (
    ReservationState,
    CreditTransactionType,
)
from packages.credits.models.domain.credit import (
    CreditAccount,
    CreditReservation,
    CreditReservationCreateModel,
    CreditTransaction,
    CreditTransactionCreateModel,
)

__all__ = [
    "ReservationState",
    "CreditTransactionType",
    "CreditAccount",
    "CreditReservation",
    "CreditReservationCreateModel",
    "CreditTransaction",
    "CreditTransactionCreateModel",
]
