from typing import Optional

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger
from common.workers.periodic_worker import PeriodicWorker
from packages.credits.services.reconciliation_service import (
    CreditReconciliationService,
)

logger = get_logger(__name__)


class CreditReconciliationWorker(PeriodicWorker):
    """Periodically releases HELD reservations whose session never settled them."""

    def __init__(
        self,
        interval_seconds: Optional[float] = None,
        service: Optional[CreditReconciliationService] = None,
    ):
        super().__init__(
            name="credit_reconciliation",
            interval_seconds=interval_seconds or settings.reconciliation_interval_seconds,
        )
        self.service = service or CreditReconciliationService()
        self.total_released = 0

    async def run_once(self):
        released = await self.service.sweep()
        self.total_released += released
