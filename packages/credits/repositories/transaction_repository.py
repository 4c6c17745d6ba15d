"""
Repository for the credit transaction log.
"""

from typing import List
from sqlalchemy import select, func

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span
from packages.credits.models.database.credit import CreditTransactionEntity
from packages.credits.models.domain.credit import CreditTransaction


class CreditTransactionRepository(
    BaseRepository[CreditTransactionEntity, CreditTransaction]
):
    def __init__(self):
        super().__init__(CreditTransactionEntity, CreditTransaction)

    @trace_span
    async def list_by_user(
        self, user_id: str, limit: int = 50, offset: int = 0
    ) -> List[CreditTransaction]:
        """Newest first."""
        async with self._get_session() as session:
            result = await session.execute(
                select(CreditTransactionEntity)
                .where(CreditTransactionEntity.user_id == user_id)
                .order_by(
                    CreditTransactionEntity.created_at.desc(),
                    CreditTransactionEntity.id.desc(),
                )
                .limit(limit)
                .offset(offset)
            )
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def count_by_user(self, user_id: str) -> int:
        async with self._get_session() as session:
            result = await session.execute(
                select(func.count(CreditTransactionEntity.id)).where(
                    CreditTransactionEntity.user_id == user_id
                )
            )
            return result.scalar_one() or 0
