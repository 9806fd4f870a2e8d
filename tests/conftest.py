"""Shared fixtures: an in-memory database per test and an API client bound to it."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from api_server import app
from database import get_db, init_db, make_engine
from ledger import LedgerStore
from seed_db import seed


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with all tables created."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db: Session) -> LedgerStore:
    return LedgerStore(db)


@pytest.fixture
def seeded_store(store: LedgerStore) -> LedgerStore:
    """Store holding the default categories, the sample ledger and the New Phone goal."""
    seed(store.db)
    return store


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    """Test client whose requests use the in-memory database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(seeded_store: LedgerStore, client: TestClient) -> TestClient:
    return client
