"""Credit services."""

from packages.credits.services.ledger_service import CreditLedgerService
from packages.credits.services.reconciliation_service import (
    CreditReconciliationService,
)
from packages.credits.services.pricing import cost

__all__ = [
    "CreditLedgerService",
    "CreditReconciliationService",
    "cost",
]
