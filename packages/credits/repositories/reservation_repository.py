"""
Repository for credit reservations.
"""

from datetime import datetime, timezone
from typing import List
from sqlalchemy import select, update

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span
from packages.credits.models.database.credit import CreditReservationEntity
from packages.credits.models.domain.credit import CreditReservation
from packages.credits.models.domain.enums import ReservationState


class CreditReservationRepository(
    BaseRepository[CreditReservationEntity, CreditReservation]
):
    def __init__(self):
        super().__init__(CreditReservationEntity, CreditReservation)

    @trace_span
    async def transition_from_held(
        self, reservation_id: str, new_state: ReservationState
    ) -> bool:
        """
        Move a HELD reservation to a terminal state.

        Returns False when the reservation is missing or already terminal;
        the row count decides which of commit/release wins.
        """
        async with self._get_session() as session:
            result = await session.execute(
                update(CreditReservationEntity)
                .where(
                    CreditReservationEntity.id == reservation_id,
                    CreditReservationEntity.state == ReservationState.HELD.value,
                )
                .values(state=new_state.value, resolved_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            await session.flush()
            return result.rowcount == 1

    @trace_span
    async def find_held_before(
        self, cutoff: datetime, limit: int = 500
    ) -> List[CreditReservation]:
        async with self._get_session() as session:
            result = await session.execute(
                select(CreditReservationEntity)
                .where(
                    CreditReservationEntity.state == ReservationState.HELD.value,
                    CreditReservationEntity.created_at < cutoff,
                )
                .order_by(CreditReservationEntity.created_at.asc())
                .limit(limit)
            )
            return self._entities_to_domain(result.scalars().all())
