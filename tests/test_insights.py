"""
Tests for the financial insight detectors and the insights endpoint.
"""
import uuid
from datetime import date, datetime, timezone

import pytest

from app.models.budget import Budget
from app.models.category import Category
from app.models.transaction import Transaction
from app.utils.budgeting import compute_snapshot
from app.utils.insights import (
    detect_budget_risks,
    detect_burn_rate,
    detect_category_overspend,
    detect_income_change,
    generate_insights,
    insight_periods,
)

TODAY = date(2024, 4, 15)
NOW = datetime(2024, 4, 15, tzinfo=timezone.utc)
APRIL = date(2024, 4, 1)
FOOD = Category(id=uuid.uuid4(), name="Food")
RENT = Category(id=uuid.uuid4(), name="Rent")


def make_tx(amount, on, category=FOOD, type="expense"):
    return Transaction(type=type, amount=amount, category_id=category.id, category=category, transaction_date=on)


def monthly(amount, months=(1, 2, 3), category=FOOD, type="expense"):
    return [make_tx(amount, date(2024, m, 10), category=category, type=type) for m in months]


class TestInsightPeriods:
    def test_defaults_to_the_month_of_today(self):
        assert insight_periods(TODAY) == (date(2023, 7, 1), APRIL, TODAY)

    def test_explicit_start_inside_the_month(self):
        history_start, current_start, end = insight_periods(TODAY, date(2024, 4, 10), date(2024, 4, 20))

        assert current_start == date(2024, 4, 10)
        assert end == date(2024, 4, 20)
        assert history_start == date(2023, 10, 10)


class TestCategoryOverspend:
    """Test suite for categories spending above their usual month."""

    def test_double_the_average_is_critical(self):
        transactions = monthly(200) + [make_tx(500, date(2024, 4, 5))]

        (insight,) = detect_category_overspend(transactions, APRIL, TODAY, NOW)

        assert insight.category == "spending_pattern"
        assert insight.severity == "critical"
        assert insight.title == "High spending in Food"
        assert insight.impact_amount == 300.0
        assert insight.benchmark_amount == 200.0

    @pytest.mark.parametrize("current, severity", [(260, "medium"), (340, "high"), (250, "low")])
    def test_severity_tiers(self, current, severity):
        transactions = monthly(200) + [make_tx(current, date(2024, 4, 5))]

        (insight,) = detect_category_overspend(transactions, APRIL, TODAY, NOW)

        assert insight.severity == severity

    def test_small_or_unproven_increases_are_ignored(self):
        """Test the ratio, the absolute delta and the two-month history requirements."""
        assert detect_category_overspend(monthly(200) + [make_tx(230, APRIL)], APRIL, TODAY, NOW) == []
        assert detect_category_overspend(monthly(100) + [make_tx(140, APRIL)], APRIL, TODAY, NOW) == []
        assert detect_category_overspend(monthly(200, months=(3,)) + [make_tx(500, APRIL)], APRIL, TODAY, NOW) == []


class TestBurnRate:
    """Test suite for the overall spending pace."""

    def test_projection_above_usual_month(self):
        transactions = monthly(300, months=(1, 2), category=RENT) + [make_tx(200, date(2024, 4, 3))]

        (insight,) = detect_burn_rate(transactions, APRIL, TODAY, NOW)

        assert insight.severity == "medium"
        assert insight.impact_amount == 100.0
        assert insight.benchmark_amount == 300.0
        assert insight.data_points[1].value == 15

    def test_normal_pace_or_no_history_is_quiet(self):
        assert detect_burn_rate(monthly(300) + [make_tx(150, APRIL)], APRIL, TODAY, NOW) == []
        assert detect_burn_rate([make_tx(900, APRIL)], APRIL, TODAY, NOW) == []


class TestBudgetRisks:
    """Test suite for budgets used faster than the month passes."""

    def entry(self, amount, spent):
        budget = Budget(id=uuid.uuid4(), category_id=FOOD.id, category=FOOD, amount=amount, month=4, year=2024)
        transactions = [make_tx(spent, date(2024, 4, 2))] if spent else []
        return budget, compute_snapshot(budget, transactions, TODAY)

    def test_usage_ahead_of_the_month(self):
        (insight,) = detect_budget_risks([self.entry(1000, 700)], NOW)

        assert insight.category == "budget_risk"
        assert insight.severity == "medium"
        assert insight.title == "Food budget at risk"
        assert insight.impact_amount == 200.0
        assert insight.benchmark_amount == 500.0

    def test_exceeded_budget_is_critical(self):
        (insight,) = detect_budget_risks([self.entry(500, 650)], NOW)
        assert insight.severity == "critical"

    def test_on_pace_and_unused_budgets_are_quiet(self):
        assert detect_budget_risks([self.entry(1000, 400), self.entry(1000, 0)], NOW) == []


class TestIncomeChange:
    """Test suite for income moving away from its average."""

    @pytest.mark.parametrize("current, severity, title", [
        (1500, "high", "Income drop detected"),
        (2400, "low", "Income drop detected"),
        (4800, "medium", "Income above expectations"),
    ])
    def test_change_is_reported(self, current, severity, title):
        transactions = monthly(3000, type="income") + [make_tx(current, APRIL, type="income")]

        (insight,) = detect_income_change(transactions, APRIL, TODAY, NOW)

        assert insight.category == "income_pattern"
        assert (insight.severity, insight.title) == (severity, title)
        assert insight.impact_amount == abs(current - 3000)

    def test_stable_income_is_quiet(self):
        transactions = monthly(3000, type="income") + [make_tx(3200, APRIL, type="income")]
        assert detect_income_change(transactions, APRIL, TODAY, NOW) == []


class TestGenerateInsights:
    """Test suite for combining, filtering and ordering insights."""

    def transactions(self):
        return (
            monthly(200)
            + [make_tx(500, date(2024, 4, 5))]
            + monthly(3000, type="income")
            + [make_tx(1500, APRIL, type="income")]
        )

    def test_most_severe_and_costly_first(self):
        insights = generate_insights(self.transactions(), [], APRIL, TODAY, NOW)

        assert [(i.title, i.severity) for i in insights] == [
            ("Spending pace above normal", "critical"),
            ("High spending in Food", "critical"),
            ("Income drop detected", "high"),
        ]

    def test_income_and_expense_switches(self):
        income_only = generate_insights(self.transactions(), [], APRIL, TODAY, NOW, include_expense=False)
        expense_only = generate_insights(self.transactions(), [], APRIL, TODAY, NOW, include_income=False)

        assert [i.category for i in income_only] == ["income_pattern"]
        assert {i.category for i in expense_only} == {"spending_pattern"}

    def test_category_filter(self):
        assert generate_insights(self.transactions(), [], APRIL, TODAY, NOW, category_id=RENT.id) == []


class TestInsightsEndpoint:
    """Test suite for GET /insights."""

    async def test_reports_spending_and_budget_risk(self, client, add_budget, add_expense):
        for month in (1, 2, 3):
            await add_expense(200, date(2024, month, 10))
        await add_expense(500, date(2024, 4, 5))
        await add_budget(600)

        response = await client.get("/api/v1/insights")

        assert response.status_code == 200
        titles = [i["title"] for i in response.json()]
        assert titles == ["Spending pace above normal", "High spending in Food", "Food budget at risk"]
        assert response.json()[2]["severity"] == "medium"

    async def test_expense_insights_can_be_switched_off(self, client, add_expense):
        for month in (1, 2, 3):
            await add_expense(200, date(2024, month, 10))
        await add_expense(500, date(2024, 4, 5))

        response = await client.get("/api/v1/insights", params={"include_expense": False})

        assert response.json() == []

    async def test_inverted_range_is_rejected(self, client):
        response = await client.get("/api/v1/insights", params={"start_date": "2024-04-10", "end_date": "2024-04-01"})
        assert response.status_code == 400
