import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from app import app
from auth import SessionContext, get_current_session
from db import build_engine, create_db_and_tables, get_session


@pytest.fixture(scope="function")
def test_engine():
    """Fresh in-memory database per test."""
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def test_session(test_engine):
    """Create a test database session."""
    with Session(test_engine) as session:
        yield session




@pytest.fixture(scope="function")
def client(test_session):
    """TestClient whose requests use the per-test database session."""

    def get_session_override():
        return test_session

    app.dependency_overrides[get_session] = get_session_override
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sign_in():
    """Sign a session in for subsequent requests."""

    def _sign_in(session_ctx: SessionContext):
        app.dependency_overrides[get_current_session] = lambda: session_ctx

    return _sign_in


@pytest.fixture
def alice():
    return SessionContext(user_id=1, username="Alice Johnson", email="alice@example.com")


@pytest.fixture
def bob():
    return SessionContext(user_id=2, username="Bob Smith", email="bob@example.com")
