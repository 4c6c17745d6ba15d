"""
Repository for credit balances.
"""

from typing import Optional
from sqlalchemy import select, update, text

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span
from packages.credits.models.database.credit import CreditAccountEntity
from packages.credits.models.domain.credit import CreditAccount


class CreditAccountRepository(BaseRepository[CreditAccountEntity, CreditAccount]):
    def __init__(self):
        super().__init__(CreditAccountEntity, CreditAccount)

    @trace_span
    async def get_by_user_id(self, user_id: str) -> Optional[CreditAccount]:
        async with self._get_session() as session:
            result = await session.execute(
                select(CreditAccountEntity).where(CreditAccountEntity.user_id == user_id)
            )
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None

    @trace_span
    async def get_balance(self, user_id: str) -> int:
        async with self._get_session() as session:
            result = await session.execute(
                select(CreditAccountEntity.balance).where(
                    CreditAccountEntity.user_id == user_id
                )
            )
            return result.scalar_one_or_none() or 0

    @trace_span
    async def ensure_account(self, user_id: str) -> CreditAccount:
        """Return the user's account, creating an empty one if missing."""
        account = await self.get_by_user_id(user_id)
        if account:
            return account

        async with self._get_session() as session:
            entity = CreditAccountEntity(user_id=user_id, balance=0)
            session.add(entity)
            await session.flush()
            await session.refresh(entity)
            return self._entity_to_domain(entity)

    @trace_span
    async def acquire_user_lock(self, user_id: str) -> None:
        """
        Take a transaction-scoped advisory lock on the user's balance.

        PostgreSQL only; released when the transaction ends. Other dialects
        rely on the distributed lock alone.
        """
        async with self._get_session() as session:
            if session.get_bind().dialect.name != "postgresql":
                return
            await session.execute(
                text("SELECT pg_advisory_xact_lock(hashtext(:user_id))"),
                {"user_id": user_id},
            )

    @trace_span
    async def debit_if_sufficient(self, user_id: str, amount: int) -> bool:
        """
        Atomic check-and-deduct.

        The balance condition is part of the UPDATE, so two debits can never
        both pass against the same balance.
        """
        async with self._get_session() as session:
            result = await session.execute(
                update(CreditAccountEntity)
                .where(
                    CreditAccountEntity.user_id == user_id,
                    CreditAccountEntity.balance >= amount,
                )
                .values(balance=CreditAccountEntity.balance - amount)
                .execution_options(synchronize_session=False)
            )
            await session.flush()
            return result.rowcount == 1

    @trace_span
    async def credit(self, user_id: str, amount: int) -> bool:
        async with self._get_session() as session:
            result = await session.execute(
                update(CreditAccountEntity)
                .where(CreditAccountEntity.user_id == user_id)
                .values(balance=CreditAccountEntity.balance + amount)
                .execution_options(synchronize_session=False)
            )
            await session.flush()
            return result.rowcount == 1
