# app/schemas/category.py
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
import uuid

from app.schemas.transaction import reject_null

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN, description="Hex color, e.g. #4CAF50")

class CategoryCreate(CategoryBase):
    pass

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)

    @field_validator("name")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)

class CategoryRead(CategoryBase):
    id: uuid.UUID
    user_id: uuid.UUID
    is_default: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
