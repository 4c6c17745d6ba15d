"""Credit repositories."""

from packages.credits.repositories.account_repository import CreditAccountRepository
from packages.credits.repositories.reservation_repository import (
    CreditReservationRepository,
)
from packages.credits.repositories.transaction_repository import (
    CreditTransactionRepository,
)

__all__ = [
    "CreditAccountRepository",
    "CreditReservationRepository",
    "CreditTransactionRepository",
]
