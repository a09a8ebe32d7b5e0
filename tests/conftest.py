"""
Shared fixtures and configuration for all tests.
"""
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Override environment settings for testing
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "testsecretkey"
os.environ["SERVICE_ROLE_KEY"] = "test-service-key"
os.environ["CSRF_TOKEN_STORE"] = "memory"
os.environ["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
os.environ["BACKEND_CORS_ORIGINS"] = '["http://localhost:3000"]'

from familyhub.main import app
from familyhub.db.base import Base
from familyhub.db.session import get_db
from familyhub.api.deps import get_current_user
from familyhub.models.user import User
from familyhub.security.csrf import CSRFProtector, set_csrf_protector
from familyhub.security.token_store import MemoryTokenStore
import familyhub.models  # noqa: F401

SERVICE_KEY = "test-service-key"

# One in-memory database shared by every connection of a test
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Test fixtures for the database
@pytest.fixture
def db():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_user(db):
    """Create a test user in the database."""
    user = User(id="user-1", email="parent@example.com", name="Test Parent", is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(autouse=True)
def csrf_store():
    """Fresh in-memory CSRF token store for every test."""
    store = MemoryTokenStore()
    set_csrf_protector(CSRFProtector(store))
    yield store
    set_csrf_protector(None)


@pytest.fixture
def client(db):
    """Return a TestClient bound to the test database, without authentication overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides = {}


@pytest.fixture
def authorized_client(client, test_user):
    """Return a TestClient that skips the authentication."""
    app.dependency_overrides[get_current_user] = lambda: test_user
    yield client


@pytest.fixture
def csrf_headers(authorized_client):
    """Issue a CSRF token (the client keeps the cookies) and return the header carrying it."""
    response = authorized_client.get("/api/security/csrf")
    assert response.status_code == 200
    return {"x-csrf-token": response.json()["token"]}


@pytest.fixture
def service_headers():
    """Authorization header of a trusted service caller."""
    return {"Authorization": f"Bearer {SERVICE_KEY}"}


@pytest.fixture
def session_factory(db):
    """Session factory bound to the test database, for code that opens its own sessions."""
    return TestingSessionLocal
