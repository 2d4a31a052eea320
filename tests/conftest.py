"""
tests/conftest.py -- Shared test fixtures for Chirpy.

This module provides:
  - ManualClock: a Clock that only moves when a test tells it to
  - clock / user_store / hasher / sessions: unit-test fixtures over a private
    in-memory DB
  - api_client: TestClient against the real app with a patched lifespan and
    isolated stores, plus a registered user and a live access token

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
API fixtures because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread.

Environment variables must be set before any api/ or core/ import so
get_settings() sees them: DEBUG auto-generates SECRET_KEY, PLATFORM=dev
unlocks /admin/reset, and the login rate limit is raised so the suite never
trips it.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

# CRITICAL: Set before any api/auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("PLATFORM", "dev")
os.environ.setdefault("POLKA_KEY", "test-polka-key")
os.environ.setdefault("LOGIN_RATE_LIMIT", "1000/minute")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import User
from auth.passwords import PasswordHasher
from auth.session import SessionConfig, SessionService
from auth.store import UserStore
from chirps.store import ChirpStore
from core.config import get_settings

TEST_SECRET = "test-secret-key-that-is-at-least-32-chars"
TEST_EMAIL = "walt@breakingbad.com"
TEST_PASSWORD = "04234"


class ManualClock:
    """A Clock whose time only changes through advance() or set()."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> None:
        self._now += timedelta(**kwargs)

    def set(self, value: datetime) -> None:
        self._now = value


# ---------------------------------------------------------------------------
# Unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    """Minimum bcrypt cost so the suite stays fast. Production uses 12."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(secret=TEST_SECRET)


@pytest.fixture
def sessions(session_config, user_store, hasher, clock) -> SessionService:
    return SessionService(session_config, user_store, hasher=hasher, clock=clock)


@pytest.fixture
def registered_user(user_store, hasher) -> User:
    """A user with TEST_EMAIL / TEST_PASSWORD already in user_store."""
    uid = user_store.create_user(User(email=TEST_EMAIL, hashed_password=hasher.hash(TEST_PASSWORD)))
    return user_store.get_by_id(uid)


# ---------------------------------------------------------------------------
# API fixtures -- one TestClient per test module
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str, clock: ManualClock) -> tuple[UserStore, ChirpStore]:
    """Create stores over one named shared-memory SQLite DB.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state (the module name is used).
    """
    db_url = f"sqlite:///file:test_chirpy_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url), ChirpStore(db_url, clock=clock)


def _patch_lifespan(user_store: UserStore, chirp_store: ChirpStore, sessions: SessionService):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.settings = get_settings()
        app.state.fileserver_hits = 0
        app.state.user_store = user_store
        app.state.chirp_store = chirp_store
        app.state.sessions = sessions
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture(scope="module")
def api_client(request, api_clock, hasher) -> Generator[tuple[TestClient, str, object], None, None]:
    """Yield (client, token, user_id) for API integration tests.

    The registered user is TEST_EMAIL / TEST_PASSWORD. token is a one-hour
    access token for that user, valid against api_clock.
    """
    user_store, chirp_store = _make_test_stores(request.module.__name__.replace(".", "_"), api_clock)
    sessions = SessionService(SessionConfig(secret=TEST_SECRET), user_store, hasher=hasher, clock=api_clock)

    uid = user_store.create_user(User(email=TEST_EMAIL, hashed_password=hasher.hash(TEST_PASSWORD)))
    token = sessions.issue_access_token(uid)

    app.router.lifespan_context = _patch_lifespan(user_store, chirp_store, sessions)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield client, token, uid

    chirp_store.close()
    user_store.close()


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
