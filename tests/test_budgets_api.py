"""
Tests for the budget endpoints, including the analytics they return.
"""
import uuid
from datetime import date

import pytest

BASE = "/api/v1/budgets"


@pytest.fixture
def budget_payload(test_category):
    return {"category_id": str(test_category.id), "amount": 1000, "month": 4, "year": 2024}


class TestBudgetCRUD:
    """Test suite for creating, reading, updating and deleting budgets."""

    async def test_create_budget_returns_snapshot(self, client, budget_payload):
        response = await client.post(BASE, json=budget_payload)

        assert response.status_code == 201
        data = response.json()
        assert data["category_name"] == "Food"
        assert data["alert_at_50"] is True
        assert data["alert_100_sent"] is False
        assert data["snapshot"]["spent"] == 0.0
        assert data["snapshot"]["status"] == "OnTrack"
        assert data["snapshot"]["days_elapsed"] == 15

    async def test_duplicate_period_is_rejected(self, client, budget_payload):
        await client.post(BASE, json=budget_payload)
        response = await client.post(BASE, json=budget_payload)
        assert response.status_code == 409

    async def test_unknown_category_is_rejected(self, client, budget_payload):
        budget_payload["category_id"] = str(uuid.uuid4())
        response = await client.post(BASE, json=budget_payload)
        assert response.status_code == 400

    @pytest.mark.parametrize("field,value", [("month", 13), ("amount", 0), ("year", 1999)])
    async def test_invalid_fields_are_rejected(self, client, budget_payload, field, value):
        budget_payload[field] = value
        response = await client.post(BASE, json=budget_payload)
        assert response.status_code == 422

    async def test_list_reflects_spending(self, client, add_budget, add_expense):
        """Test that listed budgets carry a snapshot of the month's spend."""
        await add_budget(1000)
        await add_expense(850, date(2024, 4, 3))

        response = await client.get(BASE, params={"year": 2024, "month": 4})

        assert response.status_code == 200
        (budget,) = response.json()
        assert budget["snapshot"]["spent"] == 850.0
        assert budget["snapshot"]["percentage_used"] == 85.0
        assert budget["snapshot"]["status"] == "Warning"

    async def test_current_only_lists_this_month(self, client, add_budget):
        await add_budget(1000)
        await add_budget(500, month=3)

        response = await client.get(f"{BASE}/current")

        assert [b["month"] for b in response.json()] == [4]

    async def test_update_recomputes_snapshot(self, client, add_budget, add_expense):
        budget = await add_budget(1000)
        await add_expense(850, date(2024, 4, 3))

        response = await client.patch(f"{BASE}/{budget.id}", json={"amount": 2000})

        assert response.status_code == 200
        assert response.json()["amount"] == 2000.0
        assert response.json()["snapshot"]["status"] == "OnTrack"

    @pytest.mark.parametrize("changes", [{"amount": None}, {"alert_at_80": None}])
    async def test_update_rejects_null(self, client, add_budget, changes):
        budget = await add_budget(1000)

        response = await client.patch(f"{BASE}/{budget.id}", json=changes)

        assert response.status_code == 422

    async def test_delete_budget(self, client, add_budget):
        budget = await add_budget(1000)

        assert (await client.delete(f"{BASE}/{budget.id}")).status_code == 204
        assert (await client.get(f"{BASE}/{budget.id}")).status_code == 404

    async def test_budget_for_category(self, client, add_budget, test_category):
        await add_budget(1000)

        found = await client.get(f"{BASE}/category/{test_category.id}")
        missing = await client.get(f"{BASE}/category/{test_category.id}", params={"month": 1})

        assert found.status_code == 200
        assert found.json()["month"] == 4
        assert missing.status_code == 404


class TestBudgetAnalyticsEndpoints:
    """Test suite for overview, trend and summary."""

    async def test_overview(self, client, add_budget, add_expense):
        await add_budget(1000)
        await add_expense(1200, date(2024, 4, 3))

        response = await client.get(f"{BASE}/overview")

        assert response.status_code == 200
        data = response.json()
        assert (data["month"], data["year"]) == (4, 2024)
        assert data["total_budget"] == 1000.0
        assert data["total_spent"] == 1200.0
        assert len(data["at_risk"]) == 1
        assert data["comfortable"] == []

    async def test_trend(self, client, add_budget, add_expense):
        await add_budget(500, month=3)
        await add_expense(200, date(2024, 3, 10))

        response = await client.get(f"{BASE}/trend", params={"months": 3})

        assert response.status_code == 200
        points = response.json()["points"]
        assert [(p["year"], p["month"]) for p in points] == [(2024, 2), (2024, 3), (2024, 4)]
        assert points[1]["planned"] == 500.0
        assert points[1]["spent"] == 200.0

    async def test_trend_months_are_bounded(self, client):
        response = await client.get(f"{BASE}/trend", params={"months": 25})
        assert response.status_code == 422

    async def test_summary(self, client, add_budget, add_expense):
        await add_budget(1000)
        await add_expense(250, date(2024, 4, 3))

        data = (await client.get(f"{BASE}/summary")).json()

        assert data["budgets_count"] == 1
        assert data["total_remaining"] == 750.0
        assert data["percentage_used"] == 25.0
