"""
tests/test_session.py -- Unit tests for auth/session.py (SessionService).

Exercises login/refresh/revoke end to end against an in-memory UserStore and
a ManualClock.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from auth.errors import AuthError, ErrorKind
from auth.session import SessionConfig, SessionService
from core.config import Settings
from conftest import TEST_EMAIL, TEST_PASSWORD, TEST_SECRET


def test_login_returns_user_and_both_tokens(sessions, registered_user):
    result = sessions.login(TEST_EMAIL, TEST_PASSWORD)
    assert result.user.id == registered_user.id
    assert result.user.email == TEST_EMAIL
    assert sessions.authenticate(result.access_token) == registered_user.id
    assert len(result.refresh_token) == 64


def test_login_wrong_password(sessions, registered_user, user_store):
    with pytest.raises(AuthError) as info:
        sessions.login(TEST_EMAIL, "wrong")
    assert info.value.kind is ErrorKind.CREDENTIAL_INVALID
    # No refresh token was issued for a failed login.
    assert user_store.list_refresh_tokens(registered_user.id) == []


def test_login_unknown_email_same_error_as_wrong_password(sessions, registered_user):
    with pytest.raises(AuthError) as unknown:
        sessions.login("nobody@example.com", TEST_PASSWORD)
    with pytest.raises(AuthError) as wrong:
        sessions.login(TEST_EMAIL, "wrong")
    assert unknown.value.kind is wrong.value.kind is ErrorKind.CREDENTIAL_INVALID
    assert unknown.value.public_message == wrong.value.public_message


def test_login_unknown_email_still_runs_bcrypt(sessions, monkeypatch):
    calls = []
    real_verify = sessions.hasher.verify

    def _spy(password, hashed):
        calls.append(hashed)
        return real_verify(password, hashed)

    monkeypatch.setattr(sessions.hasher, "verify", _spy)
    with pytest.raises(AuthError):
        sessions.login("nobody@example.com", "whatever")
    assert calls == [sessions._dummy_hash]


def test_login_over_long_password_is_credential_invalid(sessions, registered_user):
    with pytest.raises(AuthError) as info:
        sessions.login(TEST_EMAIL, "a" * 100)
    assert info.value.kind is ErrorKind.CREDENTIAL_INVALID


def test_login_lookup_failure_is_persistence_failure(sessions, user_store, monkeypatch):
    def _broken(email):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(user_store, "get_credential_by_email", _broken)
    with pytest.raises(AuthError) as info:
        sessions.login(TEST_EMAIL, TEST_PASSWORD)
    assert info.value.kind is ErrorKind.PERSISTENCE_FAILURE


def test_login_failure_after_verify_is_not_credential_invalid(sessions, registered_user, user_store, monkeypatch):
    def _broken(record):
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(user_store, "insert_refresh_token", _broken)
    with pytest.raises(AuthError) as info:
        sessions.login(TEST_EMAIL, TEST_PASSWORD)
    assert info.value.kind is ErrorKind.PERSISTENCE_FAILURE
    assert info.value.kind.http_status == 500


def test_refresh_issues_new_access_token(sessions, registered_user, clock):
    result = sessions.login(TEST_EMAIL, TEST_PASSWORD)
    clock.advance(hours=2)
    with pytest.raises(AuthError):
        sessions.authenticate(result.access_token)
    access = sessions.refresh(result.refresh_token)
    assert sessions.authenticate(access) == registered_user.id


def test_refresh_does_not_rotate(sessions, registered_user):
    result = sessions.login(TEST_EMAIL, TEST_PASSWORD)
    sessions.refresh(result.refresh_token)
    assert sessions.authenticate(sessions.refresh(result.refresh_token)) == registered_user.id


def test_refresh_after_revoke_rejected(sessions, registered_user):
    result = sessions.login(TEST_EMAIL, TEST_PASSWORD)
    sessions.revoke(result.refresh_token)
    with pytest.raises(AuthError) as info:
        sessions.refresh(result.refresh_token)
    assert info.value.kind is ErrorKind.TOKEN_REVOKED
    assert info.value.public_message == "Invalid or expired token."


def test_revoke_twice_succeeds(sessions, registered_user):
    result = sessions.login(TEST_EMAIL, TEST_PASSWORD)
    sessions.revoke(result.refresh_token)
    sessions.revoke(result.refresh_token)


def test_revoke_unknown_rejected(sessions):
    with pytest.raises(AuthError) as info:
        sessions.revoke("0" * 64)
    assert info.value.kind is ErrorKind.TOKEN_NOT_FOUND


def test_access_token_rejected_as_refresh_token(sessions, registered_user):
    result = sessions.login(TEST_EMAIL, TEST_PASSWORD)
    with pytest.raises(AuthError) as info:
        sessions.refresh(result.access_token)
    assert info.value.kind is ErrorKind.TOKEN_NOT_FOUND


def test_refresh_token_rejected_as_access_token(sessions, registered_user):
    result = sessions.login(TEST_EMAIL, TEST_PASSWORD)
    with pytest.raises(AuthError) as info:
        sessions.authenticate(result.refresh_token)
    assert info.value.kind is ErrorKind.TOKEN_MALFORMED


def test_refresh_token_expires_after_configured_ttl(user_store, hasher, clock, registered_user):
    config = SessionConfig(secret=TEST_SECRET, refresh_token_ttl=timedelta(days=1))
    sessions = SessionService(config, user_store, hasher=hasher, clock=clock)
    result = sessions.login(TEST_EMAIL, TEST_PASSWORD)
    clock.advance(days=1)
    with pytest.raises(AuthError) as info:
        sessions.refresh(result.refresh_token)
    assert info.value.kind is ErrorKind.TOKEN_EXPIRED


def test_tokens_from_other_secret_rejected(user_store, hasher, clock, registered_user):
    other = SessionService(SessionConfig(secret="x" * 32), user_store, hasher=hasher, clock=clock)
    mine = SessionService(SessionConfig(secret=TEST_SECRET), user_store, hasher=hasher, clock=clock)
    token = other.issue_access_token(registered_user.id)
    with pytest.raises(AuthError) as info:
        mine.authenticate(token)
    assert info.value.kind is ErrorKind.TOKEN_BAD_SIGNATURE


def test_session_config_from_settings():
    settings = Settings(
        secret_key=TEST_SECRET,
        access_token_ttl_seconds=120,
        refresh_token_ttl_days=7,
    )
    config = SessionConfig.from_settings(settings)
    assert config.secret == TEST_SECRET
    assert config.access_token_ttl == timedelta(seconds=120)
    assert config.refresh_token_ttl == timedelta(days=7)
    assert TEST_SECRET not in repr(config)


def test_subject_is_user_id_not_email(sessions, registered_user):
    result = sessions.login(TEST_EMAIL, TEST_PASSWORD)
    assert isinstance(sessions.authenticate(result.access_token), uuid.UUID)
