"""
Shared test fixtures.

Provides:
- In-memory SQLite engine (foreign keys on) with all tables created
- A session per test and a seeded user
- A FastAPI TestClient wired to the same database
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from backend.app import app, get_db
from backend.database import make_engine, make_session_factory
from backend.models import Base, User, utcnow

USER_EMAIL = "sleeper@example.com"


@pytest.fixture()
def engine():
    """Fresh in-memory database per test."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def add_user(session, email: str = USER_EMAIL) -> User:
    user = User(
        email=email,
        eight_user_id="eight-123",
        access_token="access",
        refresh_token="refresh",
        expires_at=utcnow() + timedelta(hours=1),
    )
    session.add(user)
    session.commit()
    return user


@pytest.fixture()
def user(db):
    return add_user(db)


@pytest.fixture()
def api(session_factory, user):
    """TestClient whose requests share the test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app, headers={"X-User-Email": USER_EMAIL})
    yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def scenario_payload():
    return {
        "bedTime": "22:00",
        "wakeupTime": "06:00",
        "initialSleepLevel": 0,
        "midStageTemperatures": [{"time": "02:00", "temperature": -2}],
        "finalSleepLevel": 1,
        "timezone": {"value": "America/New_York"},
    }
