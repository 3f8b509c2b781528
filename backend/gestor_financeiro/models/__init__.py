"""
Database models package.
"""

from gestor_financeiro.models.category import Category, Subcategory
from gestor_financeiro.models.expense import Expense
from gestor_financeiro.models.goal import Goal
from gestor_financeiro.models.app_setting import AppSetting

__all__ = [
    "Category",
    "Subcategory",
    "Expense",
    "Goal",
    "AppSetting",
]
