"""Test configuration and fixtures."""

from datetime import datetime, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from squad_control_tower.api import app
from squad_control_tower.config import get_settings
from squad_control_tower.db.base import create_tables, get_db


def make_engine():
    """In-memory SQLite engine shared across threads (TestClient runs sync
    endpoints in a worker thread)."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    return engine


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Create a fresh in-memory database for each test."""
    engine = make_engine()
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture(autouse=True)
def no_api_token(monkeypatch):
    """Run without the shared-token check unless a test sets one."""
    monkeypatch.setattr(get_settings(), "api_token", None)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """TestClient wired to a fresh in-memory database."""
    engine = make_engine()
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.pop(get_db, None)
    engine.dispose()


def utc(*args) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


def weekly_routine(**overrides) -> dict:
    """A valid routine payload with optional overrides."""
    defaults = {
        "title": "Weekly Sync",
        "description": "Agree on priorities for the week",
        "priority": "normal",
        "schedule": {"type": "weekly", "days_of_week": [1, 3, 5], "hour": 9, "minute": 0},
        "color": "emerald",
    }
    defaults.update(overrides)
    return defaults
