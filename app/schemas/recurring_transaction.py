# app/schemas/recurring_transaction.py
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import date, datetime
import uuid

from app.schemas.transaction import TransactionType, MAX_AMOUNT, reject_null

Frequency = Literal["daily", "weekly", "monthly", "yearly"]

class RecurringTransactionCreate(BaseModel):
    amount: float = Field(..., gt=0, le=MAX_AMOUNT)
    type: TransactionType
    description: str = Field(..., min_length=3, max_length=500)
    category_id: uuid.UUID
    frequency: Frequency
    start_date: date
    end_date: Optional[date] = None
    day_of_month: Optional[int] = Field(None, ge=1, le=31, description="Required for monthly")
    day_of_week: Optional[int] = Field(None, ge=0, le=6, description="0=Monday .. 6=Sunday, required for weekly")

    @model_validator(mode="after")
    def check_schedule(self):
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        if self.frequency == "monthly" and self.day_of_month is None:
            raise ValueError("day_of_month is required for monthly recurrences")
        if self.frequency == "weekly" and self.day_of_week is None:
            raise ValueError("day_of_week is required for weekly recurrences")
        return self

class RecurringTransactionUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)
    description: Optional[str] = Field(None, min_length=3, max_length=500)
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

    @field_validator("amount", "description", "is_active")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

class RecurringTransactionRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: float
    type: TransactionType
    description: str
    category_id: uuid.UUID
    category_name: Optional[str] = None
    frequency: Frequency
    start_date: date
    end_date: Optional[date] = None
    day_of_month: Optional[int] = None
    day_of_week: Optional[int] = None
    is_active: bool
    last_generated_date: Optional[date] = None
    next_generation_date: Optional[date] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
