"""
Category API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List

from gestor_financeiro.api.errors import to_http_exception
from gestor_financeiro.dependencies import get_gateway
from gestor_financeiro.exceptions import GestorError
from gestor_financeiro.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryList,
)
from gestor_financeiro.services.gateway import ExpenseGateway
from gestor_financeiro.services.taxonomy_service import list_subcategory_names_for_category
from gestor_financeiro.text import normalize

router = APIRouter()


@router.get("", response_model=CategoryList)
def list_categories(
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """List all categories, A-Z."""
    result = gateway.list_categories()
    if result.failed:
        raise HTTPException(status_code=503, detail="Failed to fetch categories")
    return CategoryList(items=result.items, total=len(result.items))


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    category: CategoryCreate,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """Create a category. Names are stored in canonical (normalized) form."""
    try:
        return gateway.create_category(normalize(category.name))
    except GestorError as e:
        raise to_http_exception(e) from e


@router.get("/subcategory-names", response_model=List[str])
def get_subcategory_names(
    category_name: str = Query(..., min_length=1),
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """Subcategory names of a category looked up by name (accent/case-insensitive)."""
    categories = gateway.list_categories()
    subcategories = gateway.list_subcategories()
    if categories.failed or subcategories.failed:
        raise HTTPException(status_code=503, detail="Failed to fetch taxonomy")
    return list_subcategory_names_for_category(category_name, categories.items, subcategories.items)


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: str,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """Get a specific category."""
    try:
        return gateway.get_category(category_id)
    except GestorError as e:
        raise to_http_exception(e) from e


@router.patch("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    category_update: CategoryUpdate,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """Rename a category."""
    try:
        return gateway.update_category(category_id, normalize(category_update.name))
    except GestorError as e:
        raise to_http_exception(e) from e


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """Delete a category that no subcategory or goal references."""
    try:
        gateway.delete_category(category_id)
    except GestorError as e:
        raise to_http_exception(e) from e
    return None
