"""
Tests for the recurring transaction endpoints.
"""
from datetime import date

import pytest
from sqlalchemy import select, func

from app.models.transaction import Transaction
from app.workers.recurring_generator import RecurringTransactionGenerator

BASE = "/api/v1/recurring-transactions"


@pytest.fixture
def monthly_payload(test_category):
    return {
        "amount": 50,
        "type": "expense",
        "description": "Gym membership",
        "category_id": str(test_category.id),
        "frequency": "monthly",
        "start_date": "2024-01-15",
        "day_of_month": 15,
    }


class TestRecurringTransactionEndpoints:
    """Test suite for managing recurring definitions."""

    async def test_create_monthly(self, client, monthly_payload):
        response = await client.post(BASE, json=monthly_payload)

        assert response.status_code == 201
        data = response.json()
        assert data["is_active"] is True
        assert data["last_generated_date"] is None
        assert data["category_name"] == "Food"
        # Nothing generated yet: the oldest pending date comes next
        assert data["next_generation_date"] == "2024-01-15"

    @pytest.mark.parametrize("changes", [
        {"day_of_month": None},
        {"end_date": "2024-01-01"},
        {"frequency": "weekly"},
        {"frequency": "fortnightly"},
        {"amount": -5},
    ])
    async def test_invalid_schedules_are_rejected(self, client, monthly_payload, changes):
        monthly_payload.update(changes)
        response = await client.post(BASE, json=monthly_payload)
        assert response.status_code == 422

    async def test_irrelevant_day_field_is_cleared(self, client, monthly_payload):
        monthly_payload.update(frequency="weekly", day_of_week=0)

        data = (await client.post(BASE, json=monthly_payload)).json()

        assert data["day_of_week"] == 0
        assert data["day_of_month"] is None

    async def test_toggle_pauses_and_resumes(self, client, monthly_payload):
        rec_id = (await client.post(BASE, json=monthly_payload)).json()["id"]

        paused = (await client.post(f"{BASE}/{rec_id}/toggle")).json()
        resumed = (await client.post(f"{BASE}/{rec_id}/toggle")).json()

        assert paused["is_active"] is False
        assert paused["next_generation_date"] is None
        assert resumed["is_active"] is True

    async def test_resume_skips_dates_missed_while_paused(self, client, session_factory, clock, monthly_payload):
        """Test that months that fell due during a pause are not generated on resume."""
        rec_id = (await client.post(BASE, json=monthly_payload)).json()["id"]
        generator = RecurringTransactionGenerator(session_factory, clock)
        await generator.run_once()
        await client.post(f"{BASE}/{rec_id}/toggle")

        clock.set(date(2024, 8, 20))
        resumed = (await client.post(f"{BASE}/{rec_id}/toggle")).json()
        result = await generator.run_once()

        assert resumed["last_generated_date"] == "2024-08-19"
        assert resumed["next_generation_date"] == "2024-09-15"
        assert result.generated == 0

        clock.set(date(2024, 9, 15))
        assert (await generator.run_once()).generated == 1

    async def test_resume_on_occurrence_day_keeps_that_day(self, client, session_factory, clock, monthly_payload):
        rec_id = (await client.post(BASE, json=monthly_payload)).json()["id"]
        generator = RecurringTransactionGenerator(session_factory, clock)
        await generator.run_once()
        await client.patch(f"{BASE}/{rec_id}", json={"is_active": False})

        clock.set(date(2024, 8, 15))
        await client.patch(f"{BASE}/{rec_id}", json={"is_active": True})
        result = await generator.run_once()

        assert result.generated == 1
        async with session_factory() as db:
            latest = (await db.execute(select(func.max(Transaction.transaction_date)))).scalar_one()
        assert latest == date(2024, 8, 15)

    async def test_filter_by_active_state(self, client, monthly_payload):
        rec_id = (await client.post(BASE, json=monthly_payload)).json()["id"]
        await client.post(BASE, json={**monthly_payload, "description": "Streaming"})
        await client.post(f"{BASE}/{rec_id}/toggle")

        active = (await client.get(BASE, params={"is_active": True})).json()

        assert [r["description"] for r in active] == ["Streaming"]

    async def test_update_rejects_end_before_start(self, client, monthly_payload):
        rec_id = (await client.post(BASE, json=monthly_payload)).json()["id"]

        response = await client.patch(f"{BASE}/{rec_id}", json={"end_date": "2023-12-31"})

        assert response.status_code == 422

    @pytest.mark.parametrize("changes", [
        {"amount": None},
        {"description": None},
        {"is_active": None},
    ])
    async def test_update_rejects_null_for_required_fields(self, client, monthly_payload, changes):
        rec_id = (await client.post(BASE, json=monthly_payload)).json()["id"]

        response = await client.patch(f"{BASE}/{rec_id}", json=changes)

        assert response.status_code == 422

    async def test_update_can_clear_end_date(self, client, monthly_payload):
        monthly_payload["end_date"] = "2024-12-31"
        rec_id = (await client.post(BASE, json=monthly_payload)).json()["id"]

        response = await client.patch(f"{BASE}/{rec_id}", json={"end_date": None, "amount": 65})

        assert response.status_code == 200
        assert response.json()["end_date"] is None
        assert response.json()["amount"] == 65.0

    async def test_next_date_after_generation(self, client, session_factory, clock, monthly_payload):
        rec_id = (await client.post(BASE, json=monthly_payload)).json()["id"]
        await RecurringTransactionGenerator(session_factory, clock).run_once()

        data = (await client.get(f"{BASE}/{rec_id}")).json()

        assert data["last_generated_date"] == "2024-04-15"
        assert data["next_generation_date"] == "2024-05-15"

    async def test_delete_keeps_generated_transactions(self, client, session_factory, clock, monthly_payload):
        rec_id = (await client.post(BASE, json=monthly_payload)).json()["id"]
        await RecurringTransactionGenerator(session_factory, clock).run_once()

        assert (await client.delete(f"{BASE}/{rec_id}")).status_code == 204
        assert (await client.get(f"{BASE}/{rec_id}")).status_code == 404
        async with session_factory() as db:
            count = (await db.execute(select(func.count()).select_from(Transaction))).scalar_one()
        assert count == 4
