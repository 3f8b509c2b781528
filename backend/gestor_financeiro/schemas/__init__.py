"""
Pydantic schemas package.
"""

from gestor_financeiro.schemas.category import (
    CategoryBase,
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryList,
    SubcategoryCreate,
    SubcategoryUpdate,
    SubcategoryResponse,
    SubcategoryList,
)
from gestor_financeiro.schemas.expense import (
    ExpenseBase,
    ExpenseCreate,
    ExpenseWrite,
    ExpenseRead,
    ExpenseListResponse,
)
from gestor_financeiro.schemas.goal import (
    GoalCreate,
    GoalUpdate,
    GoalRead,
    GoalListResponse,
)

__all__ = [
    "CategoryBase",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryList",
    "SubcategoryCreate",
    "SubcategoryUpdate",
    "SubcategoryResponse",
    "SubcategoryList",
    "ExpenseBase",
    "ExpenseCreate",
    "ExpenseWrite",
    "ExpenseRead",
    "ExpenseListResponse",
    "GoalCreate",
    "GoalUpdate",
    "GoalRead",
    "GoalListResponse",
]
