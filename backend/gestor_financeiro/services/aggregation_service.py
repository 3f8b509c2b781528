"""
Pure aggregation helpers behind the home and goals dashboards.

Amounts are Decimal end to end; a missing amount counts as zero.
"""

from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from gestor_financeiro.schemas.dashboard import (
    CategoryRollup,
    ExpenseSortOrder,
    GoalSortOrder,
    SubcategoryBreakdown,
)
from gestor_financeiro.schemas.expense import ExpenseRead
from gestor_financeiro.schemas.goal import GoalRead
from gestor_financeiro.text import normalize

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")

UNCATEGORIZED = "Outros"


def _amount(expense: ExpenseRead) -> Decimal:
    return expense.amount if expense.amount is not None else ZERO


def sum_amounts(expenses: Iterable[ExpenseRead]) -> Decimal:
    return sum((_amount(e) for e in expenses), ZERO)


def format_brl(amount: Decimal) -> str:
    """Brazilian currency format, e.g. Decimal("1234.5") -> "R$ 1.234,50"."""
    us = f"{amount:,.2f}"
    return "R$ " + us.replace(",", "_").replace(".", ",").replace("_", ".")


def filter_expenses(expenses: Iterable[ExpenseRead], query: Optional[str]) -> List[ExpenseRead]:
    """
    Keep expenses whose establishment, category, subcategory or amount
    contains ``query``. Matching ignores accents and case; a blank query keeps
    everything.
    """
    expenses = list(expenses)
    needle = normalize(query or "")
    if not needle:
        return expenses

    def matches(expense: ExpenseRead) -> bool:
        fields = [expense.location, expense.category_name, expense.subcategory_name]
        if expense.amount is not None:
            fields += [str(expense.amount), format_brl(expense.amount)]
        return any(needle in normalize(f) for f in fields if f)

    return [e for e in expenses if matches(e)]


def group_by_day(expenses: Iterable[ExpenseRead]) -> "OrderedDict[str, List[ExpenseRead]]":
    """Group by ISO date, newest day first. Expenses without a date are left out."""
    groups: Dict[str, List[ExpenseRead]] = {}
    for expense in expenses:
        if expense.date is None:
            continue
        groups.setdefault(expense.date.isoformat(), []).append(expense)
    return OrderedDict(sorted(groups.items(), key=lambda item: item[0], reverse=True))


def group_by_subcategory(expenses: Iterable[ExpenseRead]) -> "OrderedDict[str, List[ExpenseRead]]":
    """Group by subcategory name, A-Z. Expenses without a subcategory are left out."""
    groups: Dict[str, List[ExpenseRead]] = {}
    for expense in expenses:
        if not expense.subcategory_name or not expense.subcategory_name.strip():
            continue
        groups.setdefault(expense.subcategory_name, []).append(expense)
    return OrderedDict(sorted(groups.items(), key=lambda item: item[0]))


def group_by_category(expenses: Iterable[ExpenseRead]) -> Dict[str, List[ExpenseRead]]:
    groups: Dict[str, List[ExpenseRead]] = {}
    for expense in expenses:
        groups.setdefault(expense.category_name or UNCATEGORIZED, []).append(expense)
    return groups


def subcategory_totals(expenses: Iterable[ExpenseRead]) -> List[SubcategoryBreakdown]:
    """Per-subcategory totals, largest first."""
    rows = [
        SubcategoryBreakdown(subcategory=name, total=sum_amounts(items), expenses=items)
        for name, items in group_by_subcategory(expenses).items()
    ]
    return sorted(rows, key=lambda row: row.total, reverse=True)


def calculate_percentage(realized: Decimal, goal: Decimal) -> Decimal:
    """realized / goal * 100, rounded to cents; 0 when there is no goal."""
    if goal <= ZERO:
        return Decimal("0.00")
    return (realized / goal * HUNDRED).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_balance(goal: Decimal, realized: Decimal) -> Decimal:
    return goal - realized


def category_rollup(
    goals: Sequence[GoalRead],
    expenses_by_category: Mapping[str, Sequence[ExpenseRead]]
) -> List[CategoryRollup]:
    """
    One row per category found in either the goals or the expenses.

    Categories with spending but no goal get goal 0, percentage 0 and a
    negative balance. Goals without a category name are skipped.
    """
    rows: "OrderedDict[str, CategoryRollup]" = OrderedDict()

    for goal in goals:
        category = goal.category_name
        if not category:
            continue
        realized = sum_amounts(expenses_by_category.get(category, []))
        target = goal.target_amount if goal.target_amount is not None else ZERO
        if category in rows:
            # Several goals for one category in the same period add up
            target += rows[category].goal_amount
        rows[category] = CategoryRollup(
            category=category,
            goal_amount=target,
            realized_amount=realized,
            percentage=calculate_percentage(realized, target),
            balance=calculate_balance(target, realized),
        )

    for category, items in expenses_by_category.items():
        if category in rows:
            continue
        realized = sum_amounts(items)
        rows[category] = CategoryRollup(
            category=category,
            goal_amount=ZERO,
            realized_amount=realized,
            percentage=calculate_percentage(realized, ZERO),
            balance=calculate_balance(ZERO, realized),
        )

    return list(rows.values())


_EXPENSE_KEYS = {
    "date": lambda e: e.date.isoformat() if e.date else "",
    "amount": _amount,
    "name": lambda e: e.location or "",
    "category": lambda e: e.category_name or "",
}


def sort_expenses(expenses: Iterable[ExpenseRead], order: ExpenseSortOrder) -> List[ExpenseRead]:
    """Stable sort; missing fields sort as the empty string or zero."""
    field, direction = order.value.rsplit("_", 1)
    return sorted(expenses, key=_EXPENSE_KEYS[field], reverse=direction == "desc")


_ROLLUP_KEYS = {
    "name": lambda r: r.category,
    "value": lambda r: r.realized_amount,
    "percentage": lambda r: r.percentage,
}


def sort_rollups(rows: Iterable[CategoryRollup], order: GoalSortOrder) -> List[CategoryRollup]:
    field, direction = order.value.rsplit("_", 1)
    return sorted(rows, key=_ROLLUP_KEYS[field], reverse=direction == "desc")
