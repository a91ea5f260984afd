"""Pytest fixtures — SQLite database, fake mailer, fake identity provider and a controllable clock."""
import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from notes_app.database import Base, get_db
from notes_app.dependencies import get_clock, get_identity_provider, get_notifier
from notes_app.main import app
from notes_app.services.notifier import NotificationError, Notifier
from notes_app.services.oauth_provider import ExternalIdentity, OAuthError

# Import all models so they register with Base.metadata
from notes_app.models.user import User                # noqa: F401
from notes_app.models.note import Note, NoteTag       # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


class RecordingNotifier(Notifier):
    """Keeps sent codes in memory; set ``fail`` to simulate an SMTP outage."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def send_otp(self, email: str, code: str) -> None:
        if self.fail:
            raise NotificationError("mail server unavailable")
        self.sent.append((email, code))

    def last_code(self, email: str) -> str:
        for sent_to, code in reversed(self.sent):
            if sent_to == email:
                return code
        raise AssertionError(f"No code was sent to {email}")


class FakeClock:
    def __init__(self):
        self.now = datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeIdentityProvider:
    def __init__(self):
        self.identity = ExternalIdentity(
            subject="google-123",
            email="carol@example.com",
            name="Carol",
            avatar="https://example.com/carol.png",
        )
        self.fail = False

    def authorization_url(self, state: str) -> str:
        return f"https://accounts.example.com/auth?state={state}"

    def fetch_identity(self, code: str) -> ExternalIdentity:
        if self.fail:
            raise OAuthError("bad code")
        return self.identity


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

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


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture(scope="function")
def client(db_engine, notifier, clock, identity_provider):
    """FastAPI TestClient with the database and external collaborators overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: drive the auth flow through the API
# ---------------------------------------------------------------------------
def register_user(client: TestClient, name: str = "Alice", email: str = "alice@example.com",
                  password: str = "secret1") -> dict:
    """Helper — POST /api/auth/register and return response JSON."""
    resp = client.post("/api/auth/register", json={
        "name": name,
        "email": email,
        "password": password,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_verified_user(client: TestClient, notifier: RecordingNotifier, name: str = "Alice",
                         email: str = "alice@example.com", password: str = "secret1") -> dict:
    """Helper — register and verify, return the verify-otp response (token + user)."""
    register_user(client, name=name, email=email, password=password)
    resp = client.post("/api/auth/verify-otp", json={
        "email": email,
        "otp": notifier.last_code(email),
    })
    assert resp.status_code == 200, resp.text
    return resp.json()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_test_note(client: TestClient, token: str, title: str = "Test Note",
                     content: str = "Some content", **fields) -> dict:
    """Helper — POST /api/notes and return the created note."""
    resp = client.post("/api/notes/", json={"title": title, "content": content, **fields},
                       headers=auth_headers(token))
    assert resp.status_code == 201, resp.text
    return resp.json()["note"]
