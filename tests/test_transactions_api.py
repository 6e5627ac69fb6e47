"""
Tests for the category and transaction endpoints.
"""
from datetime import date, timedelta

BASE = "/api/v1"


class TestCategories:
    """Test suite for category management."""

    async def test_create_and_list(self, client, test_category):
        response = await client.post(f"{BASE}/categories", json={"name": "Travel", "color": "#00AAFF"})

        assert response.status_code == 201
        assert response.json()["is_default"] is False
        names = [c["name"] for c in (await client.get(f"{BASE}/categories")).json()]
        assert names == ["Food", "Travel"]

    async def test_duplicate_name_is_rejected(self, client, test_category):
        response = await client.post(f"{BASE}/categories", json={"name": "food"})
        assert response.status_code == 409

    async def test_invalid_color_is_rejected(self, client):
        response = await client.post(f"{BASE}/categories", json={"name": "Travel", "color": "blue"})
        assert response.status_code == 422

    async def test_category_in_use_cannot_be_deleted(self, client, test_category, add_expense):
        await add_expense(10, date(2024, 4, 1))

        response = await client.delete(f"{BASE}/categories/{test_category.id}")

        assert response.status_code == 409

    async def test_unused_category_is_deleted(self, client, test_category):
        assert (await client.delete(f"{BASE}/categories/{test_category.id}")).status_code == 204


class TestTransactions:
    """Test suite for manual transactions."""

    async def test_create_transaction(self, client, test_category):
        payload = {
            "amount": 42.5,
            "type": "expense",
            "description": "Grocery run",
            "category_id": str(test_category.id),
            "transaction_date": "2024-04-10",
        }

        response = await client.post(f"{BASE}/transactions", json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["category_name"] == "Food"
        assert data["recurring_transaction_id"] is None

    async def test_future_date_is_rejected(self, client, test_category):
        payload = {
            "amount": 10,
            "type": "expense",
            "description": "Too early",
            "category_id": str(test_category.id),
            "transaction_date": (date.today() + timedelta(days=5)).isoformat(),
        }
        response = await client.post(f"{BASE}/transactions", json=payload)
        assert response.status_code == 422

    async def test_paged_listing_with_filters(self, client, add_expense):
        for day in range(1, 6):
            await add_expense(10 * day, date(2024, 4, day))
        await add_expense(1000, date(2024, 4, 2), type="income")

        response = await client.get(
            f"{BASE}/transactions",
            params={"type": "expense", "page": 1, "page_size": 2},
        )

        data = response.json()
        assert data["total"] == 5
        assert [t["transaction_date"] for t in data["items"]] == ["2024-04-05", "2024-04-04"]

    async def test_date_filter(self, client, add_expense):
        await add_expense(10, date(2024, 3, 31))
        await add_expense(20, date(2024, 4, 1))

        data = (await client.get(
            f"{BASE}/transactions", params={"start_date": "2024-04-01", "end_date": "2024-04-30"}
        )).json()

        assert data["total"] == 1
        assert data["items"][0]["amount"] == 20.0
