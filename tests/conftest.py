"""Pytest configuration and fixtures."""

import os

os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["PRUNE_INTERVAL_SECONDS"] = "0"
os.environ["EMAIL_ADDRESS"] = ""
os.environ["EMAIL_APP_PASSWORD"] = ""

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.exc import OperationalError  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from greenpoll.database import Base, get_db  # noqa: E402
from greenpoll.models.poll import Poll, PollOption, PollVote  # noqa: E402, F401
from greenpoll.models.user import PasswordReset, User, UserSession, Verification  # noqa: E402, F401
from greenpoll.services.mailer import Mailer  # noqa: E402
from greenpoll.services.user import UserService  # noqa: E402
from greenpoll.services.verification import VerificationService  # noqa: E402


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="outbox")
def outbox_fixture():
    """Capture outgoing emails instead of sending them."""
    sent = []
    with patch.object(Mailer, "deliver", side_effect=sent.append):
        yield sent


@pytest.fixture(name="client")
def client_fixture(db_session: Session, outbox: list):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from greenpoll.rate_limit import limiter
    from greenpoll.services import maintenance
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    maintenance._session_factory = lambda: db_session

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    # Session cookies are Secure, so talk to the app over https.
    with TestClient(app, base_url="https://testserver") as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()
    maintenance._session_factory = None


def register_verified(db: Session, username: str, email: str, password: str) -> User:
    """Register and verify an account directly through the services."""
    registration = UserService().register(db, username, email, password)
    VerificationService().verify_user(db, registration.verification.id)
    return registration.user


def login(client: TestClient, email: str, password: str) -> str:
    """Log in through the API and return the session id."""
    response = client.get("/login", params={"email": email, "password": password})
    assert response.json() == {"success": True}
    return response.cookies["session_id"]


def use_session(client: TestClient, session_id: str) -> None:
    """Send `session_id` as the only cookie on following requests."""
    client.cookies.clear()
    client.cookies.set("session_id", session_id)


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session):
    """Create a verified test user and return its details."""
    user = register_verified(db_session, "tester", "test@example.com", "password123")
    return {
        "user_id": user.id,
        "username": user.username,
        "email": user.email,
        "password": "password123",
    }


@pytest.fixture(name="auth_client")
def auth_client_fixture(client: TestClient, test_user: dict):
    """A client logged in as the test user."""
    login(client, test_user["email"], test_user["password"])
    return client


def fail_commit(db: Session, after: int = 0):
    """Patch ``db.commit`` so that the commit following ``after`` successful ones raises."""
    real_commit = db.commit
    calls = []

    def commit():
        calls.append(None)
        if len(calls) == after + 1:
            raise OperationalError("COMMIT", {}, Exception("database is locked"))
        real_commit()

    return patch.object(db, "commit", side_effect=commit)
