"""
Hospital Auth - Test Configuration

Pytest fixtures for authentication testing.
Provides test database, client, and account fixtures.
"""

import os

# Must be set before hospital_auth.config is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime
from typing import Generator, List

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool

from hospital_auth.app import app
from hospital_auth.auth.database import get_session_factory
from hospital_auth.auth.models import Account, ROLE_ADMIN, ROLE_ADMINISTRATIF, ROLE_USER
from hospital_auth.auth.password import hash_password
from hospital_auth.client.api import HospitalApiClient
from hospital_auth.client.session_store import SessionStore
from hospital_auth.client.storage import MemoryStorage


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def test_engine():
    """Create a fresh test database engine for each test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    SQLModel.metadata.create_all(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a database session for testing."""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(scope="function")
def client(test_engine) -> Generator[TestClient, None, None]:
    """Create a test client with fresh database."""
    app.state.db_engine = test_engine
    app.state.db_session_factory = get_session_factory(test_engine)

    with TestClient(app) as c:
        yield c

    app.state.db_engine = None


def make_account(db_session, email: str, password: str, roles: List[str], verified: bool = True) -> Account:
    now = datetime.utcnow()
    account = Account(
        email=email,
        password_hash=hash_password(password),
        roles=roles,
        is_verified=verified,
        created_at=now,
        updated_at=now,
    )
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture(scope="function")
def admin_account(db_session) -> Account:
    """Verified admin account."""
    return make_account(db_session, "admin@test.com", "AdminPass123", [ROLE_ADMIN])


@pytest.fixture(scope="function")
def staff_account(db_session) -> Account:
    """Verified administrative staff account."""
    return make_account(db_session, "a@b.com", "correct", [ROLE_ADMINISTRATIF, ROLE_USER])


@pytest.fixture(scope="function")
def unverified_account(db_session) -> Account:
    """Account with correct credentials that has not been verified."""
    return make_account(db_session, "pending@test.com", "PendingPass123", [ROLE_USER], verified=False)


@pytest.fixture(scope="function")
def store() -> SessionStore:
    return SessionStore(MemoryStorage())


@pytest.fixture(scope="function")
def api(client, store) -> HospitalApiClient:
    """API client wired to the test app through the TestClient transport."""
    return HospitalApiClient(store, http=client)


def login_user(client: TestClient, email: str, password: str) -> dict:
    """Helper function to login and return the response body."""
    response = client.post(
        "/login",
        json={"email": email, "password": password},
    )
    return response.json() if response.status_code == 200 else None


def auth_headers(token: str) -> dict:
    """Create authorization headers for authenticated requests."""
    return {"Authorization": f"Bearer {token}"}
