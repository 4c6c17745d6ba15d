"""
Credit ledger.

``reserve`` debits the balance up front and records a HELD reservation;
``commit`` keeps the debit and ``release`` refunds it. Both are conditional
updates from HELD, so retries (for example from the reconciliation sweep)
never double-charge or double-refund.

Concurrent reserves for one user are serialized by the distributed lock and,
on PostgreSQL, a transaction-scoped advisory lock. The debit itself is a
conditional UPDATE, so the balance can never go negative.
"""

from datetime import datetime
from typing import List, Optional

from common.core.config import settings
from common.core.exceptions import (
    CreditLedgerBusyError,
    InsufficientCreditsError,
    NotFoundError,
    ValidationError,
)
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.security import generate_job_id
from common.db.context import readonly
from common.db.scoped import transaction
from common.providers.locking.factory import get_lock_provider
from common.providers.locking.interface import DistributedLockInterface
from packages.credits.models.domain.credit import (
    CreditReservation,
    CreditReservationCreateModel,
    CreditTransaction,
    CreditTransactionCreateModel,
)
from packages.credits.models.domain.enums import (
    CreditTransactionType,
    ReservationState,
)
from packages.credits.repositories.account_repository import CreditAccountRepository
from packages.credits.repositories.reservation_repository import (
    CreditReservationRepository,
)
from packages.credits.repositories.transaction_repository import (
    CreditTransactionRepository,
)

logger = get_logger(__name__)


def _lock_key(user_id: str) -> str:
    return f"credits:{user_id}"


class CreditLedgerService:
    def __init__(self, lock_provider: Optional[DistributedLockInterface] = None):
        self.lock_provider = lock_provider or get_lock_provider()
        self.account_repo = CreditAccountRepository()
        self.reservation_repo = CreditReservationRepository()
        self.transaction_repo = CreditTransactionRepository()

    async def _acquire_user_lock(self, user_id: str) -> str:
        token = await self.lock_provider.acquire_lock_with_retry(
            _lock_key(user_id),
            lock_ttl_seconds=settings.credit_lock_ttl_seconds,
            acquire_timeout_seconds=settings.credit_lock_acquire_timeout_seconds,
        )
        if not token:
            logger.warning(f"Credit ledger lock busy for user {user_id}")
            raise CreditLedgerBusyError(
                "Another credit operation is in progress, try again shortly"
            )
        return token

    async def _release_user_lock(self, user_id: str, token: str) -> None:
        if not await self.lock_provider.release_lock(_lock_key(user_id), token):
            # Lock expired mid-operation; the conditional UPDATE still kept the balance safe
            logger.warning(f"Credit ledger lock for user {user_id} expired before release")

    @trace_span
    @readonly
    async def get_balance(self, user_id: str) -> int:
        return await self.account_repo.get_balance(user_id)

    @trace_span
    async def reserve(
        self, user_id: str, amount: int, session_id: str
    ) -> CreditReservation:
        """
        Atomically check and deduct ``amount`` from the user's balance.

        Raises:
            InsufficientCreditsError: balance below ``amount``; nothing changed
            CreditLedgerBusyError: the per-user lock could not be acquired
        """
        if amount < 0:
            raise ValidationError("Reservation amount must be non-negative")

        token = await self._acquire_user_lock(user_id)
        try:
            async with transaction():
                await self.account_repo.acquire_user_lock(user_id)

                if not await self.account_repo.debit_if_sufficient(user_id, amount):
                    available = await self.account_repo.get_balance(user_id)
                    logger.info(
                        f"Insufficient credits for user {user_id}: {amount} required, {available} available",
                        extra={"user_id": user_id, "required": amount},
                    )
                    raise InsufficientCreditsError(required=amount, available=available)

                balance_after = await self.account_repo.get_balance(user_id)
                reservation = await self.reservation_repo.create(
                    CreditReservationCreateModel(
                        id=generate_job_id("rsv"),
                        session_id=session_id,
                        user_id=user_id,
                        amount=amount,
                    )
                )
                await self.transaction_repo.create(
                    CreditTransactionCreateModel(
                        user_id=user_id,
                        transaction_type=CreditTransactionType.CONSUMPTION,
                        amount=-amount,
                        balance_after=balance_after,
                        reservation_id=reservation.id,
                        notes=f"Generation session {session_id}",
                    )
                )
        finally:
            await self._release_user_lock(user_id, token)

        logger.info(
            f"Reserved {amount} credits for user {user_id} (reservation {reservation.id})",
            extra={"user_id": user_id, "reservation_id": reservation.id},
        )
        return reservation

    @trace_span
    async def commit(self, reservation_id: str) -> bool:
        """Finalize the debit. No-op returning False if already terminal."""
        async with transaction():
            committed = await self.reservation_repo.transition_from_held(
                reservation_id, ReservationState.COMMITTED
            )

        if committed:
            logger.info(f"Committed reservation {reservation_id}")
        else:
            logger.info(f"Reservation {reservation_id} already resolved, commit skipped")
        return committed

    @trace_span
    async def release(self, reservation_id: str, reason: Optional[str] = None) -> bool:
        """Refund the reserved amount. No-op returning False if already terminal."""
        async with transaction():
            released = await self.reservation_repo.transition_from_held(
                reservation_id, ReservationState.RELEASED
            )
            if not released:
                logger.info(
                    f"Reservation {reservation_id} already resolved, release skipped"
                )
                return False

            reservation = await self.reservation_repo.get(reservation_id)
            if reservation is None:
                raise NotFoundError(f"Reservation {reservation_id} not found")

            await self.account_repo.credit(reservation.user_id, reservation.amount)
            balance_after = await self.account_repo.get_balance(reservation.user_id)
            await self.transaction_repo.create(
                CreditTransactionCreateModel(
                    user_id=reservation.user_id,
                    transaction_type=CreditTransactionType.REFUND,
                    amount=reservation.amount,
                    balance_after=balance_after,
                    reservation_id=reservation_id,
                    notes=reason or f"Refund for session {reservation.session_id}",
                )
            )

        logger.info(
            f"Released reservation {reservation_id}, refunded {reservation.amount} credits",
            extra={"reservation_id": reservation_id, "user_id": reservation.user_id},
        )
        return True

    @trace_span
    async def get_reservation(self, reservation_id: str) -> Optional[CreditReservation]:
        return await self.reservation_repo.get(reservation_id)

    @trace_span
    async def grant(self, user_id: str, amount: int, notes: Optional[str] = None) -> int:
        """Add credits to a user's balance, creating the account if needed."""
        if amount <= 0:
            raise ValidationError("Grant amount must be positive")

        token = await self._acquire_user_lock(user_id)
        try:
            async with transaction():
                await self.account_repo.acquire_user_lock(user_id)
                await self.account_repo.ensure_account(user_id)
                await self.account_repo.credit(user_id, amount)
                balance_after = await self.account_repo.get_balance(user_id)
                await self.transaction_repo.create(
                    CreditTransactionCreateModel(
                        user_id=user_id,
                        transaction_type=CreditTransactionType.GRANT,
                        amount=amount,
                        balance_after=balance_after,
                        notes=notes,
                    )
                )
        finally:
            await self._release_user_lock(user_id, token)

        logger.info(f"Granted {amount} credits to user {user_id}")
        return balance_after

    @trace_span
    @readonly
    async def get_transactions(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> tuple[List[CreditTransaction], int]:
        transactions = await self.transaction_repo.list_by_user(user_id, limit, offset)
        total = await self.transaction_repo.count_by_user(user_id)
        return transactions, total

    @trace_span
    async def find_stale_reservations(
        self, older_than: datetime
    ) -> List[CreditReservation]:
        return await self.reservation_repo.find_held_before(older_than)

    @trace_span
    async def release_stale(self, older_than: datetime) -> int:
        """Release every HELD reservation created before ``older_than``."""
        released = 0
        for reservation in await self.find_stale_reservations(older_than):
            if await self.release(reservation.id, reason="Expired reservation"):
                released += 1
        return released
