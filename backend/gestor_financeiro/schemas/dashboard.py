"""
Dashboard schemas.
"""

import enum
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel

from gestor_financeiro.schemas.expense import ExpenseRead


class ExpenseSortOrder(str, enum.Enum):
    """Orderings offered on the home screen."""
    date_desc = "date_desc"
    date_asc = "date_asc"
    amount_desc = "amount_desc"
    amount_asc = "amount_asc"
    name_asc = "name_asc"
    name_desc = "name_desc"
    category_asc = "category_asc"
    category_desc = "category_desc"


class GoalSortOrder(str, enum.Enum):
    """Orderings offered on the goals screen."""
    name_asc = "name_asc"
    name_desc = "name_desc"
    value_asc = "value_asc"
    value_desc = "value_desc"
    percentage_asc = "percentage_asc"
    percentage_desc = "percentage_desc"


class DataStatus(str, enum.Enum):
    ok = "ok"
    empty = "empty"
    error = "error"


class DayGroup(BaseModel):
    date: str
    total: Decimal
    expenses: List[ExpenseRead]


class HomeDashboard(BaseModel):
    year: int
    month: int
    status: DataStatus
    error: Optional[str] = None
    total: Decimal
    count: int
    expenses: List[ExpenseRead]
    days: List[DayGroup]


class CategoryRollup(BaseModel):
    category: str
    goal_amount: Decimal
    realized_amount: Decimal
    percentage: Decimal
    balance: Decimal


class SubcategoryBreakdown(BaseModel):
    subcategory: str
    total: Decimal
    expenses: List[ExpenseRead]


class GoalCategoryRow(CategoryRollup):
    subcategories: List[SubcategoryBreakdown] = []
    expenses: List[ExpenseRead] = []


class GoalsDashboard(BaseModel):
    year: int
    month: int
    status: DataStatus
    error: Optional[str] = None
    total_spent: Decimal
    total_planned: Decimal
    categories: List[GoalCategoryRow]
