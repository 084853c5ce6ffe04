"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from payplan_gateway.api.main import create_app
from payplan_gateway.api.dependencies import get_today
from payplan_gateway.infrastructure.database.models import Base
from payplan_gateway.infrastructure.database.session import build_engine, get_db
from payplan_gateway.domain.models import PaymentCondition, RecurringExpenseConfig


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2024, 1, 15)


@pytest.fixture
def today() -> date:
    """Pinned clock used by every API test"""
    return TODAY


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session, today: date) -> TestClient:
    """Create FastAPI test client with test database and a fixed date"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: today
    return TestClient(app)


@pytest.fixture
def three_times_thirty() -> PaymentCondition:
    """3 installments every 30 days, no down payment"""
    return PaymentCondition(installments_count=3, interval_days=30, name="30/60/90")


@pytest.fixture
def monthly_rent() -> RecurringExpenseConfig:
    """Fixed monthly rent due on the 10th, running since 2023"""
    return RecurringExpenseConfig(
        id="0b7f6a52-52a4-4b65-9d0a-6ad4e2b4f001",
        amount_cents=250_000,
        recurrence_type="monthly",
        due_day=10,
        start_date=date(2023, 1, 1),
        supplier_id="landlord",
    )


@pytest.fixture
def condition_payload() -> dict:
    """Payment condition request body: 20% down, then 2 installments 30 days apart"""
    return {
        "name": "20% + 30/60",
        "installments_count": 2,
        "interval_days": 30,
        "down_payment_percent": str(Decimal("20")),
    }
