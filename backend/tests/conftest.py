"""Shared test fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from datetime import date
from decimal import Decimal
import uuid

from gestor_financeiro.ai.extractor import BaseExpenseExtractor, ExtractionResult
from gestor_financeiro.database import Base
from gestor_financeiro.dependencies import get_db, get_extractor, get_session_factory
from gestor_financeiro.main import app
from gestor_financeiro.models import AppSetting, Category, Expense, Goal, Subcategory


class StubExtractor(BaseExpenseExtractor):
    """Extractor returning a canned payload and recording every SMS it sees."""

    def __init__(self, payload=None, error=None):
        self.payload = payload or {}
        self.error = error
        self.calls = []

    async def extract_expense(self, sms_text, subcategories, categories):
        self.calls.append(sms_text)
        if self.error is not None:
            raise self.error
        return ExtractionResult.model_validate(self.payload)


@pytest.fixture(scope="function")
def session_factory():
    """Session factory over a fresh in-memory SQLite database for each test."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Session the test itself uses to arrange and inspect data."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sample_category(db_session):
    """Create a sample category."""
    category = Category(id=str(uuid.uuid4()), name="Alimentação")
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def sample_subcategory(db_session, sample_category):
    """Create a sample subcategory under sample_category."""
    subcategory = Subcategory(
        id=str(uuid.uuid4()),
        name="Supermercado",
        category_id=sample_category.id
    )
    db_session.add(subcategory)
    db_session.commit()
    db_session.refresh(subcategory)
    return subcategory


@pytest.fixture
def sample_expense(db_session, sample_subcategory):
    """Create a sample expense in May 2024."""
    expense = Expense(
        id=str(uuid.uuid4()),
        amount=Decimal("42.50"),
        date=date(2024, 5, 3),
        subcategory_id=sample_subcategory.id,
        location="Padaria Central",
        time="08:15",
        status="approved"
    )
    db_session.add(expense)
    db_session.commit()
    db_session.refresh(expense)
    return expense


@pytest.fixture
def sample_goal(db_session, sample_category):
    """Create a May 2024 goal for sample_category."""
    goal = Goal(
        id=str(uuid.uuid4()),
        category_id=sample_category.id,
        target_amount=Decimal("200.00"),
        period="mensal",
        start_date=date(2024, 5, 1)
    )
    db_session.add(goal)
    db_session.commit()
    db_session.refresh(goal)
    return goal


@pytest.fixture
def sender_number(db_session):
    """Configure 12345 as the only accepted SMS sender."""
    db_session.add(AppSetting(key="sms_sender_number", value="12345"))
    db_session.commit()
    return "12345"


@pytest.fixture
def extraction_payload(sample_subcategory):
    """What the model answers for a card purchase SMS."""
    return {
        "estabelecimento": "Supermercado Bom Preço",
        "valor": "157,32",
        "data_competencia": "2024-05-10",
        "hora": "14:32",
        "id_subcategoria": sample_subcategory.id,
        "cartao": "Visa",
        "final_cartao": "1234",
    }


@pytest.fixture
def stub_extractor(extraction_payload):
    return StubExtractor(extraction_payload)


@pytest.fixture(scope="function")
def client(db_session, session_factory, stub_extractor):
    """Create a test client with database and extractor overrides."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_extractor] = lambda: stub_extractor
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
