"""Pytest fixtures and configuration for fedauth tests."""

import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from fedauth.auth.session_tokens import SessionTokenService
from fedauth.config import PROVIDER_ENV_KEYS, ProviderCredentials, Settings, get_settings
from fedauth.database.database import Base, get_db
from fedauth.database import models  # noqa: F401
from fedauth.database.user_repository import UserRepository


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_TOKEN_SECRET = "test-token-secret-0123456789abcdef"


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def user_repository(db_session: Session):
    """Create a UserRepository instance for testing."""
    return UserRepository(db_session)


@pytest.fixture
def settings():
    """Settings with a fixed signing secret and credentials for every provider."""
    return Settings(
        token_secret=TEST_TOKEN_SECRET,
        provider_timeout_seconds=5.0,
        providers={
            name: ProviderCredentials(client_id=f"{name}-client-id", client_secret=f"{name}-secret")
            for name in PROVIDER_ENV_KEYS
        },
    )


@pytest.fixture
def token_service(settings):
    return SessionTokenService.from_settings(settings)


@pytest.fixture
def make_response():
    """Build a fake `requests.Response`.

    `payload` becomes the JSON body; `text` is the raw body used by
    form-encoded providers.
    """
    def _make(payload=None, status_code=200, text=""):
        response = MagicMock()
        response.status_code = status_code
        response.ok = status_code < 400
        if payload is None:
            response.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            response.json.return_value = payload
        response.text = text
        return response
    return _make


@pytest.fixture
def test_client(db_session: Session, settings):
    """FastAPI test client with overridden database and settings dependencies."""
    from fedauth.api.app import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings

    # Not used as a context manager: the lifespan would run init_db() against
    # the real DATABASE_URL.
    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(token_service):
    """Build an Authorization header for a user id."""
    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {token_service.issue(user_id)}"}
    return _headers
