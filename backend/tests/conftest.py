"""
Shared fixtures: in-memory SQLite database (one connection via StaticPool) with all
tables created, a session on it, and a FastAPI TestClient wired to the same database.
"""
import os

# Settings are read at import time; keep tests off any real database.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_BACKEND"] = "db"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import catalog.models  # noqa: F401
from catalog.db.base import Base
from catalog.db.session import get_db
from catalog.main import app
from catalog.services.search_store import insert_search

BASE_TIME = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def add_search(db):
    """Insert a search minutes_ago before BASE_TIME (distinct created_at per call)."""

    def _add(ean: str, description: str = "Opis produktu", minutes: int = 0) -> dict:
        return insert_search(db, ean=ean, description=description, created_at=BASE_TIME + timedelta(minutes=minutes))

    return _add


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
