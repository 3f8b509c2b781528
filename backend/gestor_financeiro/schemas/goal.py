"""
Goal schemas.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import date
from decimal import Decimal


class GoalBase(BaseModel):
    category_id: str
    target_amount: Decimal = Field(..., ge=0)
    period: Optional[str] = "mensal"
    start_date: date


class GoalCreate(GoalBase):
    pass


class GoalUpdate(GoalBase):
    pass


class GoalRead(GoalBase):
    id: str
    category_name: Optional[str] = None

    class Config:
        from_attributes = True


class GoalListResponse(BaseModel):
    items: list[GoalRead]
    total: int
