from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from packages.credits.models.domain.enums import ReservationState
from packages.credits.services.reconciliation_service import (
    CreditReconciliationService,
)


class TestCreditReconciliationService:
    """Sweeping reservations left HELD past their TTL."""

    async def test_fresh_reservations_are_left_alone(self, ledger):
        """Test reservations younger than the TTL are kept."""
        await ledger.grant("u1", 100)
        reservation = await ledger.reserve("u1", 75, "sess-1")
        service = CreditReconciliationService(ledger=ledger, ttl_seconds=900)

        assert await service.sweep() == 0

        held = await ledger.get_reservation(reservation.id)
        assert held.state == ReservationState.HELD

    async def test_stale_held_reservations_are_released(self, ledger):
        """Test stale HELD reservations are released and refunded."""
        await ledger.grant("u1", 200)
        stale = await ledger.reserve("u1", 75, "sess-1")
        committed = await ledger.reserve("u1", 100, "sess-2")
        await ledger.commit(committed.id)
        service = CreditReconciliationService(ledger=ledger, ttl_seconds=900)

        later = datetime.now(timezone.utc) + timedelta(seconds=900 + 60)
        released = await service.sweep(now=later)

        assert released == 1
        assert (await ledger.get_reservation(stale.id)).state == ReservationState.RELEASED
        assert (
            await ledger.get_reservation(committed.id)
        ).state == ReservationState.COMMITTED
        assert await ledger.get_balance("u1") == 100

    async def test_second_sweep_releases_nothing(self, ledger):
        """Test a repeated sweep finds nothing left to release."""
        await ledger.grant("u1", 100)
        await ledger.reserve("u1", 75, "sess-1")
        service = CreditReconciliationService(ledger=ledger, ttl_seconds=900)
        later = datetime.now(timezone.utc) + timedelta(seconds=1000)

        assert await service.sweep(now=later) == 1
        assert await service.sweep(now=later) == 0
        assert await ledger.get_balance("u1") == 100

    async def test_cutoff_is_now_minus_ttl(self):
        """Test the sweep cutoff is the current time minus the TTL."""
        ledger = AsyncMock()
        ledger.release_stale = AsyncMock(return_value=0)
        service = CreditReconciliationService(ledger=ledger, ttl_seconds=60)
        now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

        await service.sweep(now=now)

        ledger.release_stale.assert_awaited_once_with(
            datetime(2026, 1, 1, 11, 59, tzinfo=timezone.utc)
        )

    def test_ttl_defaults_to_settings(self):
        """Test the TTL is read from settings by default."""
        service = CreditReconciliationService(ledger=AsyncMock())
        assert service.ttl_seconds == 900
