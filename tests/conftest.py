"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real one. Tables are created before each test and dropped after,
so every test starts from an empty ledger.
"""

import os

# Settings are read at import time; point them at SQLite first
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from jewelry_ledger.config import Settings
from jewelry_ledger.main import app
from jewelry_ledger.models.base import Base, build_engine, get_db


TEST_DATABASE_URL = "sqlite:///./test.db"

# build_engine adds SAVEPOINT support, which every ledger write needs
engine = build_engine(TEST_DATABASE_URL)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def fast_retry_settings():
    """Settings with no backoff delay, for contention tests."""
    settings = Settings()
    settings.BALANCE_RETRY_ATTEMPTS = 3
    settings.BALANCE_RETRY_BASE_DELAY = 0.0
    settings.BALANCE_RETRY_MAX_DELAY = 0.0
    return settings


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def rival_session():
    """
    A second connection to the test database, for races.

    SQLite allows one writer at a time; the short busy timeout
    makes a blocked write fail fast with "database is locked".
    """
    rival_engine = build_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False, "timeout": 0.1},
    )
    session = sessionmaker(bind=rival_engine, autoflush=False)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        rival_engine.dispose()
