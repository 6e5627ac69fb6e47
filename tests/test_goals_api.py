"""
Tests for the goal and notification endpoints.
"""
from datetime import date

from app.models.notification import Notification


class TestGoals:
    """Test suite for monthly spending goals."""

    async def test_goal_lifecycle(self, client, test_category, add_expense):
        payload = {"category_id": str(test_category.id), "target_amount": 200, "month": 4, "year": 2024}
        created = await client.post("/api/v1/goals", json=payload)
        duplicate = await client.post("/api/v1/goals", json=payload)
        await add_expense(170, date(2024, 4, 5))

        status = (await client.get("/api/v1/goals/status")).json()

        assert created.status_code == 201
        assert created.json()["category_name"] == "Food"
        assert duplicate.status_code == 409
        (goal,) = status
        assert goal["current_amount"] == 170.0
        assert goal["percentage"] == 85.0
        assert goal["status"] == "Warning"

    async def test_insights(self, client, test_category, add_expense):
        await client.post("/api/v1/goals", json={
            "category_id": str(test_category.id), "target_amount": 100, "month": 3, "year": 2024,
        })
        await add_expense(20, date(2024, 3, 5))

        insights = (await client.get("/api/v1/goals/insights")).json()

        assert insights["total_goals"] == 1
        assert len(insights["overdue"]) == 1
        assert insights["completed"] == []


class TestNotifications:
    """Test suite for the in-app notification inbox."""

    async def test_read_flow(self, client, db_session, test_user):
        for pct in (55.0, 85.0):
            db_session.add(Notification(
                user_id=test_user.id, title="Budget alert", message=f"{pct}% used",
                type="budget_alert", status="info", percentage=pct,
            ))
        await db_session.commit()

        listed = (await client.get("/api/v1/notification/")).json()
        assert len(listed) == 2
        assert (await client.get("/api/v1/notification/unread-count")).json() == 2

        read = (await client.post(f"/api/v1/notification/{listed[0]['id']}/read")).json()
        assert read["is_read"] is True
        assert (await client.get("/api/v1/notification/unread-count")).json() == 1

        assert (await client.post("/api/v1/notification/read_all")).json() == 1
        assert (await client.get("/api/v1/notification/", params={"unread_only": True})).json() == []

    async def test_missing_notification(self, client):
        response = await client.get("/api/v1/notification/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404


class TestHealth:
    async def test_health(self, client):
        data = (await client.get("/health")).json()
        assert data["status"] == "healthy"
        assert data["workers"] == {}
