"""Pytest fixtures — in-memory SQLite database for fast, isolated tests."""
import os
import uuid
from datetime import datetime, timedelta, timezone

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from portal.config import settings
from portal.database import Base, get_db
from portal.main import app

# Import all models so they register with Base.metadata
from portal.models.user import User                      # noqa: F401
from portal.models.event import Event                    # noqa: F401
from portal.models.participant import EventParticipant   # noqa: F401

settings.BCRYPT_ROUNDS = 4
DEFAULT_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh in-memory SQLite engine for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def create_test_user(client: TestClient, first_name: str = "Test", last_name: str = "User",
                     password: str = DEFAULT_PASSWORD) -> dict:
    """Helper — POST /api/users and return the response JSON plus the password."""
    email = f"{first_name}.{last_name}.{uuid.uuid4().hex[:8]}@acme.io".lower()
    resp = client.post("/api/users", json={
        "email": email,
        "first_name": first_name,
        "last_name": last_name,
        "password": password,
    })
    assert resp.status_code == 201, resp.text
    data = resp.json()
    data["password"] = password
    return data


def login(client: TestClient, user: dict) -> None:
    """Helper — bind ``user`` to the client's session cookie."""
    resp = client.post("/api/auth/login", json={"email": user["email"], "password": user["password"]})
    assert resp.status_code == 200, resp.text


def create_test_event(client: TestClient, title: str = "Team Sync", start: datetime = None,
                      duration_hours: float = 1, event_type: str = "team_meeting",
                      participant_ids: list = None, **extra):
    """Helper — POST /api/events as the logged-in user; returns the raw response."""
    if start is None:
        start = datetime.now(timezone.utc) + timedelta(days=1)
    end = start + timedelta(hours=duration_hours)
    payload = {
        "title": title,
        "event_type": event_type,
        "start_time": start.isoformat(),
        "end_time": end.isoformat(),
        "participantIds": participant_ids or [],
    }
    payload.update(extra)
    return client.post("/api/events", json=payload)


def make_user(db, first_name: str = "Test", last_name: str = "User") -> User:
    """Helper — insert a user row directly (service-level tests)."""
    user = User(
        email=f"{first_name}.{last_name}.{uuid.uuid4().hex[:8]}@acme.io".lower(),
        first_name=first_name,
        last_name=last_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
