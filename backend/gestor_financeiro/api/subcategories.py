"""
Subcategory API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional

from gestor_financeiro.api.errors import to_http_exception
from gestor_financeiro.dependencies import get_gateway
from gestor_financeiro.exceptions import GestorError
from gestor_financeiro.schemas.category import (
    SubcategoryCreate,
    SubcategoryUpdate,
    SubcategoryResponse,
    SubcategoryList,
)
from gestor_financeiro.services.gateway import ExpenseGateway
from gestor_financeiro.text import normalize

router = APIRouter(prefix="/subcategories", tags=["subcategories"])


@router.get("", response_model=SubcategoryList)
def list_subcategories(
    category_id: Optional[str] = None,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """List subcategories, optionally only those of one category."""
    result = gateway.list_subcategories(category_id)
    if result.failed:
        raise HTTPException(status_code=503, detail="Failed to fetch subcategories")
    return SubcategoryList(items=result.items, total=len(result.items))


@router.post("", response_model=SubcategoryResponse, status_code=201)
def create_subcategory(
    subcategory: SubcategoryCreate,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    try:
        return gateway.create_subcategory(normalize(subcategory.name), subcategory.category_id)
    except GestorError as e:
        raise to_http_exception(e) from e


@router.get("/{subcategory_id}", response_model=SubcategoryResponse)
def get_subcategory(
    subcategory_id: str,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    try:
        return gateway.get_subcategory(subcategory_id)
    except GestorError as e:
        raise to_http_exception(e) from e


@router.patch("/{subcategory_id}", response_model=SubcategoryResponse)
def update_subcategory(
    subcategory_id: str,
    update: SubcategoryUpdate,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """Rename a subcategory or move it to another category."""
    try:
        return gateway.update_subcategory(
            subcategory_id,
            name=normalize(update.name) if update.name is not None else None,
            category_id=update.category_id,
        )
    except GestorError as e:
        raise to_http_exception(e) from e


@router.delete("/{subcategory_id}", status_code=204)
def delete_subcategory(
    subcategory_id: str,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    try:
        gateway.delete_subcategory(subcategory_id)
    except GestorError as e:
        raise to_http_exception(e) from e
    return None
