"""
Main API router.
"""

from fastapi import APIRouter
from gestor_financeiro.api import categories, subcategories, expenses, goals, dashboard, settings, sms

api_router = APIRouter()

api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(subcategories.router)
api_router.include_router(expenses.router)
api_router.include_router(goals.router)
api_router.include_router(dashboard.router)
api_router.include_router(settings.router)
api_router.include_router(sms.router)
