"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown (in-memory SQLite)
- An in-memory stand-in for the Redis client behind the session cache
- A recording notification sink
- Services wired to those doubles, and a FastAPI test client
"""

import os

# Must be set before connect.core.config is imported
os.environ.setdefault("JWT_ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("JWT_ISSUER", "connect-tests")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JSON_LOGS", "false")

import time

import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from connect.core.database import Base, get_db
from connect.core.deps import get_notifier
from connect.core.session_cache import SessionCache
from connect.models import User, EmailVerification  # noqa: F401
from connect.services.auth_service import AuthService
from connect.services.token_service import TokenService
from connect.services.verification_service import VerificationService
import main


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeRedis:
    """
    In-memory stand-in for redis.Redis with decode_responses=True.

    Supports the commands the session cache uses and honours SETEX expiry
    against a clock that tests can move forward with advance().
    """

    def __init__(self):
        self.data = {}
        self.offset = 0.0
        self.closed = False

    def _now(self):
        return time.monotonic() + self.offset

    def advance(self, seconds):
        self.offset += seconds

    def get(self, key):
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._now():
            del self.data[key]
            return None
        return value

    def setex(self, key, ttl, value):
        self.data[key] = (value, self._now() + ttl)
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    def ping(self):
        return True

    def close(self):
        self.closed = True


class BrokenRedis(FakeRedis):
    """Redis client whose every command fails like an unreachable server."""

    def get(self, key):
        raise redis.ConnectionError("connection refused")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("connection refused")

    def delete(self, *keys):
        raise redis.TimeoutError("timed out")

    def ping(self):
        raise redis.ConnectionError("connection refused")


@pytest.fixture
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def session_cache(fake_redis):
    return SessionCache(fake_redis)


@pytest.fixture
def broken_cache():
    """Session cache whose Redis is unreachable."""
    return SessionCache(BrokenRedis())


@pytest.fixture
def sent_codes():
    """Every (code, email) handed to the notification sink."""
    return []


@pytest.fixture
def notifier(sent_codes):
    def record(code, email):
        sent_codes.append((code, email))
    return record


@pytest.fixture
def token_service(session_cache):
    return TokenService(
        cache=session_cache,
        access_secret="test-access-secret",
        refresh_secret="test-refresh-secret",
        access_ttl_seconds=15 * 60,
        refresh_ttl_seconds=30 * 24 * 60 * 60,
        issuer="connect-tests",
    )


@pytest.fixture
def verification_service(db_session, notifier):
    return VerificationService(db_session, notifier)


@pytest.fixture
def auth_service(db_session, token_service):
    return AuthService(db_session, token_service)


@pytest.fixture
def verified_record(verification_service, sent_codes):
    """Request and verify a code for bob@x.com; returns the verification snapshot."""
    def _verify(email="bob@x.com"):
        verification_service.request_code(email)
        code = [c for c, e in sent_codes if e == email][-1]
        return verification_service.verify_code(email, code)
    return _verify


@pytest.fixture
def client(db_session, session_cache, notifier, monkeypatch):
    """
    FastAPI test client with the database, session cache and notifier overridden.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Tables come from the db_session fixture
    monkeypatch.setattr(main, "init_db", lambda: None)

    app = main.app
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.state.session_cache = session_cache

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    app.state.session_cache = None
