# app/schemas/goal.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
import uuid

from app.schemas.transaction import MAX_AMOUNT, reject_null
from app.schemas.budget import check_period_year

class GoalCreate(BaseModel):
    category_id: uuid.UUID
    target_amount: float = Field(..., gt=0, le=MAX_AMOUNT)
    month: int = Field(..., ge=1, le=12)
    year: int

    @field_validator("year")
    @classmethod
    def check_year(cls, value: int) -> int:
        return check_period_year(value)

class GoalUpdate(BaseModel):
    target_amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)

    @field_validator("target_amount")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

class GoalRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    category_id: uuid.UUID
    category_name: Optional[str] = None
    target_amount: float
    month: int
    year: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class GoalStatus(BaseModel):
    goal_id: uuid.UUID
    category_id: uuid.UUID
    category_name: Optional[str] = None
    target_amount: float
    current_amount: float
    remaining_amount: float
    percentage: float
    status: str
    month: int
    year: int

class GoalInsights(BaseModel):
    overdue: List[GoalStatus] = []
    at_risk: List[GoalStatus] = []
    completed: List[GoalStatus] = []
    total_goals: int = 0
    total_target_amount: float = 0.0
    total_current_amount: float = 0.0
