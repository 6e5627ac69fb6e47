# app/schemas/transaction.py
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date, datetime, timedelta
import uuid

TransactionType = Literal["income", "expense"]

MAX_AMOUNT = 1_000_000

def _not_far_future(value: Optional[date]) -> Optional[date]:
    if value is not None and value > date.today() + timedelta(days=1):
        raise ValueError("transaction_date cannot be in the future")
    return value

def reject_null(value):
    """For PATCH fields that may be omitted but not cleared."""
    if value is None:
        raise ValueError("may be omitted but not null")
    return value

class TransactionBase(BaseModel):
    amount: float = Field(..., gt=0, le=MAX_AMOUNT)
    type: TransactionType
    description: str = Field(..., min_length=3, max_length=500, description="E.g. Grocery at Costco")
    category_id: uuid.UUID
    transaction_date: date = Field(..., description="Calendar date of the transaction")

class TransactionCreate(TransactionBase):
    @field_validator("transaction_date")
    @classmethod
    def check_date(cls, value: date) -> date:
        return _not_far_future(value)

class TransactionUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0, le=MAX_AMOUNT)
    type: Optional[TransactionType] = None
    description: Optional[str] = Field(None, min_length=3, max_length=500)
    category_id: Optional[uuid.UUID] = None
    transaction_date: Optional[date] = None

    @field_validator("transaction_date")
    @classmethod
    def check_date(cls, value: Optional[date]) -> Optional[date]:
        return _not_far_future(value)

    @field_validator("amount", "type", "description", "category_id", "transaction_date")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

class TransactionRead(TransactionBase):
    id: uuid.UUID
    user_id: uuid.UUID
    category_name: Optional[str] = None
    recurring_transaction_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class TransactionPage(BaseModel):
    items: List[TransactionRead]
    total: int
    page: int
    page_size: int
