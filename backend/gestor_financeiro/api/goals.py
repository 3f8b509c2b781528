"""
Goal API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from gestor_financeiro.api.errors import to_http_exception
from gestor_financeiro.dependencies import get_gateway
from gestor_financeiro.exceptions import GestorError
from gestor_financeiro.schemas.goal import GoalCreate, GoalListResponse, GoalRead, GoalUpdate
from gestor_financeiro.services.gateway import ExpenseGateway

router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("", response_model=GoalListResponse)
def list_goals(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    gateway: ExpenseGateway = Depends(get_gateway)
):
    """List goals, optionally only those starting in one month."""
    if (year is None) != (month is None):
        raise HTTPException(status_code=422, detail="year and month must be given together")

    if year is not None:
        result = gateway.list_goals_by_month(year, month)
    else:
        result = gateway.list_goals()

    if result.failed:
        raise HTTPException(status_code=503, detail="Failed to fetch goals")
    return GoalListResponse(items=result.items, total=len(result.items))


@router.get("/{goal_id}", response_model=GoalRead)
def get_goal(
    goal_id: str,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    try:
        return gateway.get_goal(goal_id)
    except GestorError as e:
        raise to_http_exception(e) from e


@router.post("", response_model=GoalRead, status_code=201)
def create_goal(
    goal: GoalCreate,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    try:
        return gateway.create_goal(goal)
    except GestorError as e:
        raise to_http_exception(e) from e


@router.put("/{goal_id}", response_model=GoalRead)
def update_goal(
    goal_id: str,
    goal: GoalUpdate,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    try:
        return gateway.update_goal(goal_id, goal)
    except GestorError as e:
        raise to_http_exception(e) from e


@router.delete("/{goal_id}", status_code=204)
def delete_goal(
    goal_id: str,
    gateway: ExpenseGateway = Depends(get_gateway)
):
    try:
        gateway.delete_goal(goal_id)
    except GestorError as e:
        raise to_http_exception(e) from e
    return None
