from httpx import AsyncClient


class TestCreditRoutes:
    """Balance and history endpoints for the authenticated user."""

    async def test_balance_for_new_user_is_zero(self, client: AsyncClient):
        """Test a user without an account sees a zero balance."""
        response = await client.get("/api/v1/credits/balance")

        assert response.status_code == 200
        assert response.json() == {"balance": 0}

    async def test_balance_after_grant_and_reserve(
        self, client: AsyncClient, ledger, test_user
    ):
        """Test the balance reflects grants and held reservations."""
        await ledger.grant(test_user.user_id, 200)
        await ledger.reserve(test_user.user_id, 75, "sess-1")

        response = await client.get("/api/v1/credits/balance")

        assert response.json() == {"balance": 125}

    async def test_transactions_are_camel_cased_and_paged(
        self, client: AsyncClient, ledger, test_user
    ):
        """Test history is paged and serialized with camelCase keys."""
        await ledger.grant(test_user.user_id, 200, notes="Welcome credits")
        await ledger.reserve(test_user.user_id, 100, "sess-1")

        response = await client.get(
            "/api/v1/credits/transactions", params={"limit": 1}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert len(body["transactions"]) == 1
        latest = body["transactions"][0]
        assert latest["transactionType"] == "consumption"
        assert latest["amount"] == -100
        assert latest["balanceAfter"] == 100

    async def test_other_users_history_is_hidden(
        self, client: AsyncClient, ledger
    ):
        """Test another user's transactions never appear."""
        await ledger.grant("someone-else", 500)

        response = await client.get("/api/v1/credits/transactions")

        assert response.json() == {"transactions": [], "total": 0}

    async def test_limit_is_validated(self, client: AsyncClient):
        """Test an out of range limit is rejected."""
        response = await client.get(
            "/api/v1/credits/transactions", params={"limit": 0}
        )
        assert response.status_code == 422
