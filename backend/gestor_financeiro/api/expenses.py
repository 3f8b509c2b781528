"""
Expense API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from gestor_financeiro.api.errors import to_http_exception
from gestor_financeiro.dependencies import get_gateway
from gestor_financeiro.exceptions import GestorError
from gestor_financeiro.schemas.dashboard import ExpenseSortOrder
from gestor_financeiro.schemas.expense import (
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseRead,
    ExpenseWrite,
)
from gestor_financeiro.services.aggregation_service import sort_expenses
from gestor_financeiro.services.gateway import ExpenseGateway
from gestor_financeiro.services.taxonomy_service import resolve_subcategory_id

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    sort: ExpenseSortOrder = ExpenseSortOrder.date_desc,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """List expenses, optionally restricted to one month."""
    if (year is None) != (month is None):
        raise HTTPException(status_code=422, detail="year and month must be given together")

    if year is not None:
        result = gateway.list_expenses_by_month(year, month)
    else:
        result = gateway.list_expenses()

    if result.failed:
        raise HTTPException(status_code=503, detail="Failed to fetch expenses")

    items = sort_expenses(result.items, sort)
    return ExpenseListResponse(items=items, total=len(items))


@router.get("/{expense_id}", response_model=ExpenseRead)
def get_expense(
    expense_id: str,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    try:
        return gateway.get_expense(expense_id)
    except GestorError as e:
        raise to_http_exception(e) from e


@router.post("", response_model=ExpenseRead, status_code=201)
def create_expense(
    expense: ExpenseCreate,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """
    Create an expense by direct user entry.

    The subcategory is given either by id or by category and subcategory
    names, which are resolved against the current taxonomy.
    """
    subcategory_id = expense.subcategory_id
    if subcategory_id is None:
        if not expense.category_name or not expense.subcategory_name:
            raise HTTPException(
                status_code=422,
                detail="Provide subcategory_id or both category_name and subcategory_name"
            )
        categories = gateway.list_categories()
        subcategories = gateway.list_subcategories()
        if categories.failed or subcategories.failed:
            raise HTTPException(status_code=503, detail="Failed to fetch taxonomy")
        subcategory_id = resolve_subcategory_id(
            expense.category_name,
            expense.subcategory_name,
            subcategories.items,
            categories.items
        )
        if subcategory_id is None:
            raise HTTPException(status_code=404, detail="Subcategory not found")

    data = ExpenseWrite(
        **expense.model_dump(exclude={"subcategory_id", "category_name", "subcategory_name"}),
        subcategory_id=subcategory_id
    )
    try:
        return gateway.create_expense(data)
    except GestorError as e:
        raise to_http_exception(e) from e


@router.put("/{expense_id}", response_model=ExpenseRead)
def update_expense(
    expense_id: str,
    expense: ExpenseWrite,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """Replace every field of an expense."""
    try:
        return gateway.update_expense(expense_id, expense)
    except GestorError as e:
        raise to_http_exception(e) from e


@router.delete("/{expense_id}", status_code=204)
def delete_expense(
    expense_id: str,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """Delete an expense permanently."""
    try:
        gateway.delete_expense(expense_id)
    except GestorError as e:
        raise to_http_exception(e) from e
    return None
