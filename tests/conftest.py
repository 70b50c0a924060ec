import os

# Settings are read at import time; tests run against their own engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from rent_ledger.database import get_db
from rent_ledger.models.base import Base
from rent_ledger.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from rent_ledger.models import (  # noqa: F401
    Charge,
    Payment,
    PaymentAllocation,
    Property,
    Tenant,
    Unit,
    User,
    UserMigration,
)
# Import FastAPI app AFTER model imports
from rent_ledger.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: str = "test-user-123", expired: bool = False) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


@pytest.fixture
def mock_jwt_token():
    """Generate valid JWT token"""
    return create_test_token()


@pytest.fixture
def auth_headers(mock_jwt_token):
    """Authorization headers for authenticated requests"""
    return {"Authorization": f"Bearer {mock_jwt_token}"}


@pytest.fixture
def user_a_headers():
    """Authorization headers for user A"""
    token = create_test_token(user_id="user-a")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_b_headers():
    """Authorization headers for user B"""
    token = create_test_token(user_id="user-b")
    return {"Authorization": f"Bearer {token}"}


def create_unit(client, headers, property_name: str = "Sunrise Apartments", unit_number: str = "A1") -> int:
    """Create a property with one unit and return the unit id"""
    prop = client.post("/api/properties", headers=headers, json={"name": property_name}).json()
    unit = client.post(
        f"/api/properties/{prop['id']}/units", headers=headers, json={"unit_number": unit_number}
    ).json()
    return unit["id"]


def onboard_tenant(client, headers, unit_id: int, as_of: str, **fields) -> dict:
    """Onboard a tenant through the API, billing through as_of"""
    data = {
        "unit_id": unit_id,
        "name": "Jane Wanjiku",
        "phone": "+254700000001",
        "rent_amount": 20000,
        "lease_start": "2024-01-10",
    }
    data.update(fields)
    response = client.post(f"/api/tenants?as_of={as_of}", headers=headers, json=data)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def unit_id(client, auth_headers):
    """A vacant unit owned by the default test user"""
    return create_unit(client, auth_headers)
