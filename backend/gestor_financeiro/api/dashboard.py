"""
Dashboard API endpoints.
"""

from fastapi import APIRouter, Depends, Query
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from gestor_financeiro.dependencies import get_gateway
from gestor_financeiro.schemas.dashboard import (
    DataStatus,
    DayGroup,
    ExpenseSortOrder,
    GoalCategoryRow,
    GoalSortOrder,
    GoalsDashboard,
    HomeDashboard,
)
from gestor_financeiro.services.aggregation_service import (
    category_rollup,
    filter_expenses,
    group_by_category,
    group_by_day,
    sort_expenses,
    sort_rollups,
    subcategory_totals,
    sum_amounts,
)
from gestor_financeiro.services.gateway import ExpenseGateway

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def resolve_period(year: Optional[int], month: Optional[int]) -> Tuple[int, int]:
    today = date.today()
    return year or today.year, month or today.month


@router.get("/home", response_model=HomeDashboard)
def get_home_dashboard(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    sort: ExpenseSortOrder = ExpenseSortOrder.date_desc,
    q: Optional[str] = Query(None, max_length=100),
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """
    Expenses of a month grouped by day, newest day first.
    `q` keeps only expenses whose establishment, category, subcategory or
    amount contains it (accent and case-insensitive).
    Returns: total, count, expenses (in the requested order), days with per-day totals
    """
    year, month = resolve_period(year, month)
    result = gateway.list_expenses_by_month(year, month)

    if result.failed:
        return HomeDashboard(
            year=year, month=month, status=DataStatus.error, error=result.error,
            total=Decimal("0"), count=0, expenses=[], days=[]
        )

    expenses = sort_expenses(filter_expenses(result.items, q), sort)
    days = [
        DayGroup(date=day, total=sum_amounts(items), expenses=items)
        for day, items in group_by_day(expenses).items()
    ]

    return HomeDashboard(
        year=year,
        month=month,
        status=DataStatus.empty if result.is_empty else DataStatus.ok,
        total=sum_amounts(expenses),
        count=len(expenses),
        expenses=expenses,
        days=days,
    )


@router.get("/goals", response_model=GoalsDashboard)
def get_goals_dashboard(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    sort: GoalSortOrder = GoalSortOrder.value_desc,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """
    Spending against goals, per category, for a month.
    Returns: total_spent, total_planned, categories with subcategory breakdown
    """
    year, month = resolve_period(year, month)
    expenses = gateway.list_expenses_by_month(year, month)
    goals = gateway.list_goals_by_month(year, month)

    if expenses.failed or goals.failed:
        return GoalsDashboard(
            year=year, month=month, status=DataStatus.error,
            error=expenses.error or goals.error,
            total_spent=Decimal("0"), total_planned=Decimal("0"), categories=[]
        )

    by_category = group_by_category(expenses.items)
    rows = []
    for rollup in sort_rollups(category_rollup(goals.items, by_category), sort):
        category_expenses = sort_expenses(by_category.get(rollup.category, []), ExpenseSortOrder.date_desc)
        rows.append(GoalCategoryRow(
            **rollup.model_dump(),
            subcategories=subcategory_totals(category_expenses),
            expenses=category_expenses,
        ))

    empty = expenses.is_empty and goals.is_empty
    return GoalsDashboard(
        year=year,
        month=month,
        status=DataStatus.empty if empty else DataStatus.ok,
        total_spent=sum_amounts(expenses.items),
        total_planned=sum((g.target_amount for g in goals.items), Decimal("0")),
        categories=rows,
    )
