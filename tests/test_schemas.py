"""
Tests for request validation in the pydantic schemas.
"""
from datetime import date
import uuid

import pytest
from pydantic import ValidationError

from app.models.category import Category
from app.schemas.budget import BudgetCreate, BudgetUpdate
from app.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from app.schemas.goal import GoalUpdate
from app.schemas.recurring_transaction import RecurringTransactionCreate, RecurringTransactionUpdate
from app.schemas.transaction import TransactionUpdate


def recurring(**fields):
    values = dict(
        amount=100,
        type="expense",
        description="Rent payment",
        category_id=uuid.uuid4(),
        frequency="monthly",
        start_date=date(2024, 1, 1),
        day_of_month=1,
    )
    values.update(fields)
    return RecurringTransactionCreate(**values)


class TestRecurringTransactionCreate:
    """Test suite for recurring schedule validation."""

    def test_valid_monthly(self):
        assert recurring().day_of_month == 1

    def test_daily_needs_no_day(self):
        assert recurring(frequency="daily", day_of_month=None).frequency == "daily"

    def test_end_date_may_equal_start(self):
        assert recurring(end_date=date(2024, 1, 1)).end_date == date(2024, 1, 1)

    @pytest.mark.parametrize("fields", [
        {"day_of_month": None},
        {"day_of_month": 32},
        {"frequency": "weekly", "day_of_week": 7},
        {"frequency": "weekly"},
        {"end_date": date(2023, 12, 31)},
        {"description": "ab"},
        {"amount": 1_000_001},
    ])
    def test_invalid(self, fields):
        with pytest.raises(ValidationError):
            recurring(**fields)


class TestBudgetCreate:
    """Test suite for budget validation."""

    def test_alerts_default_on(self):
        budget = BudgetCreate(category_id=uuid.uuid4(), amount=500, month=4, year=2024)
        assert (budget.alert_at_50, budget.alert_at_80, budget.alert_at_100) == (True, True, True)

    @pytest.mark.parametrize("fields", [
        {"amount": 0},
        {"month": 0},
        {"year": 2019},
        {"year": date.today().year + 6},
    ])
    def test_invalid(self, fields):
        values = dict(category_id=uuid.uuid4(), amount=500, month=4, year=2024)
        values.update(fields)
        with pytest.raises(ValidationError):
            BudgetCreate(**values)


class TestCategoryCreate:
    def test_color_must_be_hex(self):
        with pytest.raises(ValidationError):
            CategoryCreate(name="Travel", color="#12345")
        assert CategoryCreate(name="Travel", color="#A1b2C3").color == "#A1b2C3"

    def test_read_from_orm_row(self):
        category = Category(id=uuid.uuid4(), user_id=uuid.uuid4(), name="Travel", color="#A1B2C3", is_default=False)
        read = CategoryRead.model_validate(category)
        assert (read.name, read.color, read.is_default) == ("Travel", "#A1B2C3", False)
        assert CategoryRead.model_config["from_attributes"] is True


class TestPartialUpdates:
    """Test suite for PATCH bodies: fields may be omitted but required columns cannot be nulled."""

    @pytest.mark.parametrize("schema, fields", [
        (TransactionUpdate, {"amount": None}),
        (TransactionUpdate, {"category_id": None}),
        (RecurringTransactionUpdate, {"description": None}),
        (BudgetUpdate, {"alert_at_50": None}),
        (GoalUpdate, {"target_amount": None}),
        (CategoryUpdate, {"name": None}),
    ])
    def test_null_is_rejected(self, schema, fields):
        with pytest.raises(ValidationError):
            schema(**fields)

    def test_omitted_fields_stay_unset(self):
        assert TransactionUpdate(amount=12.5).model_dump(exclude_unset=True) == {"amount": 12.5}

    def test_nullable_columns_may_be_cleared(self):
        assert RecurringTransactionUpdate(end_date=None).model_dump(exclude_unset=True) == {"end_date": None}
        assert CategoryUpdate(icon=None, color=None).model_dump(exclude_unset=True) == {"icon": None, "color": None}
