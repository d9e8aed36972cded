"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Test client (FastAPI TestClient)
- Session assertion helpers
- A Google-style RSA signing key for id_token tests
- Sample data factories
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator
from uuid import uuid4

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from jose import jwk, jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.session import get_db
from app.deps import get_session_authenticator
from app.models.note import Note
from app.models.reminder import Reminder
from app.models.user import UserCredential


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# Use SQLite in-memory for fast tests (no PostgreSQL dependency)
# StaticPool keeps the same connection across all operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},  # Required for SQLite
    poolclass=StaticPool,  # Keep connection alive across operations
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_CLIENT_ID = "test-client.apps.googleusercontent.com"
TEST_KEY_ID = "test-kid"


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test function.

    - Creates all tables
    - Yields a session for the test
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database.

    Overrides the get_db dependency to use our test database.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# USER FIXTURES
# ---------------------------------------------------------------------------

def make_user(db: Session, **overrides) -> UserCredential:
    """Insert a user with a live token pair unless overridden."""
    now = datetime.now(timezone.utc)
    values = dict(
        id=uuid4(),
        google_id=f"google-{uuid4().hex[:12]}",
        email="test@example.com",
        display_name="Test User",
        access_token="A1",
        refresh_token="R1",
        access_token_expires_at=now + timedelta(hours=1),
        token_version=1,
        created_at=now,
        updated_at=now,
    )
    values.update(overrides)
    user = UserCredential(**values)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user_factory(db: Session) -> Callable[..., UserCredential]:
    """Factory for extra users: user_factory(refresh_token=None, ...)."""
    return lambda **overrides: make_user(db, **overrides)


@pytest.fixture
def test_user(db: Session) -> UserCredential:
    """
    Create a signed-in user with a valid Google token pair.

    Returns:
        UserCredential with access_token "A1" and refresh_token "R1"
    """
    return make_user(db, google_id="google-sub-123")


@pytest.fixture
def other_user(db: Session) -> UserCredential:
    """A second user, for ownership checks."""
    return make_user(db, google_id="google-sub-456", email="other@example.com")


@pytest.fixture
def test_user_token(test_user: UserCredential) -> str:
    """
    Create a session assertion for the test user.

    Returns:
        Signed session JWT
    """
    return get_session_authenticator().issue(test_user.id)


@pytest.fixture
def auth_headers(test_user_token: str) -> dict:
    """
    Create authorization headers with the test user's session assertion.

    Returns:
        Dict with Authorization header
    """
    return {"Authorization": f"Bearer {test_user_token}"}


# ---------------------------------------------------------------------------
# CONTENT FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def test_note(db: Session, test_user: UserCredential) -> Note:
    note = Note(user_id=test_user.id, title="Call Sam", content="About the Q3 renewal")
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


@pytest.fixture
def test_reminder(db: Session, test_user: UserCredential) -> Reminder:
    reminder = Reminder(
        user_id=test_user.id,
        title="Send proposal",
        due_date=datetime.now(timezone.utc) + timedelta(days=2),
    )
    db.add(reminder)
    db.commit()
    db.refresh(reminder)
    return reminder


# ---------------------------------------------------------------------------
# ID TOKEN FIXTURES
# ---------------------------------------------------------------------------

def _generate_pem_pair():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


@pytest.fixture(scope="session")
def signing_keys() -> dict:
    """
    RSA key pair standing in for one of Google's signing keys.

    Returns:
        {"private_pem": bytes, "jwks": {"keys": [...]}}
    """
    private_pem, public_pem = _generate_pem_pair()
    public_jwk = jwk.construct(public_pem, algorithm="RS256").to_dict()
    public_jwk["kid"] = TEST_KEY_ID
    public_jwk["use"] = "sig"
    return {"private_pem": private_pem, "jwks": {"keys": [public_jwk]}}


@pytest.fixture(scope="session")
def foreign_private_pem() -> bytes:
    """A key Google never published."""
    private_pem, _ = _generate_pem_pair()
    return private_pem


@pytest.fixture
def make_id_token(signing_keys: dict) -> Callable[..., str]:
    """
    Factory for id_tokens signed like Google's.

    Any claim can be overridden or removed (pass None).
    """
    def _make(private_pem: bytes = None, **overrides) -> str:
        now = int(time.time())
        claims = {
            "iss": "https://accounts.google.com",
            "aud": TEST_CLIENT_ID,
            "sub": "google-sub-123",
            "email": "jane@gmail.com",
            "email_verified": True,
            "name": "Jane Doe",
            "picture": "https://lh3.googleusercontent.com/a/jane",
            "iat": now,
            "exp": now + 3600,
        }
        claims.update(overrides)
        claims = {key: value for key, value in claims.items() if value is not None}
        return jwt.encode(
            claims,
            private_pem or signing_keys["private_pem"],
            algorithm="RS256",
            headers={"kid": TEST_KEY_ID},
        )

    return _make


@pytest.fixture
def google_client_id() -> str:
    """OAuth client id the test id_tokens are issued for."""
    return TEST_CLIENT_ID
