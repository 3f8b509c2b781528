"""
Expense schemas.
"""

from pydantic import BaseModel, Field, computed_field
from typing import Optional
import datetime as dt
from decimal import Decimal

APPROVED_STATUS = "approved"


class ExpenseBase(BaseModel):
    amount: Decimal = Field(..., ge=0)
    date: dt.date
    location: Optional[str] = None
    detail: Optional[str] = None
    time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$")
    card: Optional[str] = None
    card_last_digits: Optional[int] = Field(None, ge=0, le=9999)
    status: Optional[str] = APPROVED_STATUS
    due_date: Optional[dt.date] = None


class ExpenseCreate(ExpenseBase):
    """
    Manual entry. Either ``subcategory_id`` or the pair
    ``category_name``/``subcategory_name`` identifies the subcategory.
    """
    subcategory_id: Optional[str] = None
    category_name: Optional[str] = None
    subcategory_name: Optional[str] = None


class ExpenseWrite(ExpenseBase):
    """Fully resolved record, used for inserts and full-record replaces."""
    subcategory_id: str


class ExpenseRead(BaseModel):
    """Expense enriched with display fields computed at read time."""
    id: Optional[str] = None
    amount: Optional[Decimal] = None
    subcategory_id: Optional[str] = None
    location: Optional[str] = None
    detail: Optional[str] = None
    time: Optional[str] = None
    card: Optional[str] = None
    card_last_digits: Optional[int] = None
    status: Optional[str] = None
    due_date: Optional[dt.date] = None
    created_at: Optional[dt.datetime] = None
    date: Optional[dt.date] = None

    category_name: Optional[str] = None
    subcategory_name: Optional[str] = None
    month: Optional[int] = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def establishment(self) -> Optional[str]:
        return self.location


class ExpenseListResponse(BaseModel):
    items: list[ExpenseRead]
    total: int
