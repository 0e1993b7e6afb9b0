"""Pytest configuration and fixtures for ResearchHub tests.

Test isolation strategy:
- Tests run against DATABASE_URL when set, otherwise an in-memory SQLite database
- The schema is created from the ORM metadata once per session
- Tests that use db_session get a nested transaction (savepoint) that rolls back
- API tests use a TestClient whose requests share the test's db_session,
  in-memory storage and a parser with remote parsing disabled
"""

import os
from collections.abc import Generator
from uuid import UUID

from tests.utils.db import SQLITE_MEMORY_URL, TestDatabaseManager, create_test_engine

os.environ.setdefault("DATABASE_URL", SQLITE_MEMORY_URL)
os.environ.setdefault("RESEARCHHUB_ENV", "test")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from researchhub.api.deps import get_db
from researchhub.app import add_request_id_middleware, create_app
from researchhub.config import clear_settings_cache
from researchhub.db.models import Base
from researchhub.parser import ParserClient
from researchhub.services.users import create_bootstrap_callback
from researchhub.storage import FakeStorageClient
from tests.helpers import create_test_user_id


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    """Create a database engine for the test session with the schema in place."""
    clear_settings_cache()
    engine = create_test_engine(os.environ["DATABASE_URL"])
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Provide a database session with savepoint isolation.

    Each test gets a fresh session that is rolled back after the test,
    ensuring no data persists between tests.
    """
    with TestDatabaseManager(engine) as session:
        yield session


@pytest.fixture
def fake_storage() -> FakeStorageClient:
    """In-memory storage shared by the app and the test."""
    return FakeStorageClient()


@pytest.fixture
def offline_parser() -> ParserClient:
    """Parser with remote parsing disabled (no API key)."""
    return ParserClient(api_key=None)


@pytest.fixture
def app(
    db_session: Session, fake_storage: FakeStorageClient, offline_parser: ParserClient
) -> FastAPI:
    """Provide the full application wired to the test session.

    Auth middleware verifies tokens with the configured secret and bootstraps
    users through db_session; request-id middleware is outermost.
    """
    app = create_app(
        bootstrap_callback=create_bootstrap_callback(db_session),
        storage_client=fake_storage,
        parser_client=offline_parser,
    )
    app.dependency_overrides[get_db] = lambda: db_session
    add_request_id_middleware(app, log_requests=False)
    return app


@pytest.fixture
def auth_client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client with auth middleware.

    Use auth_headers() to generate valid tokens for requests.
    """
    with TestClient(app) as client:
        yield client


@pytest.fixture
def test_user_id() -> UUID:
    """Generate a random UUID for a test user."""
    return create_test_user_id()
