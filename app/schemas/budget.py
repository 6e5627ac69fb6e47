# app/schemas/budget.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime
import uuid

from app.schemas.transaction import MAX_AMOUNT, reject_null

MIN_BUDGET_YEAR = 2020

def check_period_year(value: Optional[int]) -> Optional[int]:
    if value is None:
        return value
    max_year = date.today().year + 5
    if value < MIN_BUDGET_YEAR or value > max_year:
        raise ValueError(f"year must be between {MIN_BUDGET_YEAR} and {max_year}")
    return value

class BudgetCreate(BaseModel):
    category_id: uuid.UUID
    amount: float = Field(..., gt=0, le=MAX_AMOUNT)
    month: int = Field(..., ge=1, le=12)
    year: int
    alert_at_50: bool = True
    alert_at_80: bool = True
    alert_at_100: bool = True

    @field_validator("year")
    @classmethod
    def check_year(cls, value: int) -> int:
        return check_period_year(value)

class BudgetUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)
    alert_at_50: Optional[bool] = None
    alert_at_80: Optional[bool] = None
    alert_at_100: Optional[bool] = None

    @field_validator("amount", "alert_at_50", "alert_at_80", "alert_at_100")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

class BudgetSnapshot(BaseModel):
    """Derived spending analytics for one budget; never persisted."""
    spent: float
    remaining: float
    percentage_used: float
    status: str
    days_in_month: int
    days_elapsed: int
    days_remaining: int
    daily_budget: float
    burn_rate: float
    burn_rate_variance: float
    projected_spend: float
    projected_variance: float
    historical_average: float
    suggested_budget: float
    budget_variance: float
    transactions_count: int
    last_transaction_date: Optional[date] = None
    recommendation: str

class BudgetRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    category_id: uuid.UUID
    category_name: Optional[str] = None
    amount: float
    month: int
    year: int
    alert_at_50: bool
    alert_at_80: bool
    alert_at_100: bool
    alert_50_sent: bool
    alert_80_sent: bool
    alert_100_sent: bool
    created_at: Optional[datetime] = None
    snapshot: Optional[BudgetSnapshot] = None

    model_config = ConfigDict(from_attributes=True)

class BudgetOverviewItem(BaseModel):
    budget_id: uuid.UUID
    category_id: uuid.UUID
    category_name: Optional[str] = None
    amount: float
    spent: float
    percentage_used: float
    status: str
    projected_variance: float
    burn_rate_variance: float
    suggested_budget: float
    potential_reallocation: float

class BudgetOverview(BaseModel):
    month: int
    year: int
    total_budget: float
    total_spent: float
    total_remaining: float
    percentage_used: float
    total_projected_spend: float
    at_risk: List[BudgetOverviewItem]
    comfortable: List[BudgetOverviewItem]
    suggested_reallocation: float
    recommendation: str

class BudgetTrendPoint(BaseModel):
    month: int
    year: int
    planned: float
    spent: float
    variance: float
    remaining: float
    coverage_percentage: float
    categories_tracked: int

class BudgetTrend(BaseModel):
    months: int
    points: List[BudgetTrendPoint]

class BudgetSummary(BaseModel):
    month: int
    year: int
    total_budget: float
    total_spent: float
    total_remaining: float
    percentage_used: float
    budgets_count: int
