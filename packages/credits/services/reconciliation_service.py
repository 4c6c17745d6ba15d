from datetime import datetime, timedelta, timezone
from typing import Optional

from common.core.config import settings
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.credits.services.ledger_service import CreditLedgerService

logger = get_logger(__name__)


class CreditReconciliationService:
    """Releases reservations that never reached COMMITTED or RELEASED."""

    def __init__(
        self,
        ledger: Optional[CreditLedgerService] = None,
        ttl_seconds: Optional[int] = None,
    ):
        self.ledger = ledger or CreditLedgerService()
        self.ttl_seconds = (
            ttl_seconds
            if ttl_seconds is not None
            else settings.credit_reservation_ttl_seconds
        )

    @trace_span
    async def sweep(self, now: Optional[datetime] = None) -> int:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(
            seconds=self.ttl_seconds
        )
        released = await self.ledger.release_stale(cutoff)
        if released:
            logger.warning(
                f"Released {released} stale credit reservations older than {cutoff.isoformat()}",
                extra={"released_count": released},
            )
        else:
            logger.debug("No stale credit reservations")
        return released
