"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from vema_gateway.api.main import create_app
from vema_gateway.domain.models import FuneralCoverMembership, FuneralPlanId, MemberProfile
from vema_gateway.infrastructure.database.models import Base
from vema_gateway.infrastructure.database.repositories import UserRepository
from vema_gateway.infrastructure.database.session import get_db
from vema_gateway.infrastructure.database.store import DocumentStore


# Test database
TEST_DATABASE_URL = "sqlite:///./test_vema.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def store(db: Session) -> DocumentStore:
    return DocumentStore(db)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def member(store: DocumentStore) -> MemberProfile:
    """Registered member with no savings and no cover"""
    profile = UserRepository(store).save(
        MemberProfile(
            uid="member_1",
            email="thandi@example.co.za",
            display_name="Thandi Mokoena",
            phone_number="0821234567",
        )
    )
    store.db.commit()
    return profile


@pytest.fixture
def covered_since():
    """Build a basic-plan cover that started the given number of days ago"""

    def _build(days_ago: int, now: datetime) -> FuneralCoverMembership:
        return FuneralCoverMembership(
            user_id="member_1",
            plan_id=FuneralPlanId.BASIC,
            start_date=now - timedelta(days=days_ago),
            monthly_premium=Decimal("99"),
        )

    return _build


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
