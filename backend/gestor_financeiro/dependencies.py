"""
FastAPI dependencies.
"""

from typing import Callable, Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from gestor_financeiro.ai.extractor import BaseExpenseExtractor, LLMExpenseExtractor
from gestor_financeiro.database import SessionLocal
from gestor_financeiro.services.gateway import ExpenseGateway
from gestor_financeiro.services.settings_service import DatabaseSettingsStore, SettingsStore


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database sessions.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory() -> Callable[[], Session]:
    """Session factory for work that outlives the request (background tasks)."""
    return SessionLocal


def get_gateway(db: Session = Depends(get_db)) -> ExpenseGateway:
    return ExpenseGateway(db)


def get_settings_store(db: Session = Depends(get_db)) -> SettingsStore:
    return DatabaseSettingsStore(db)


def get_extractor() -> BaseExpenseExtractor:
    return LLMExpenseExtractor()
