"""
tests/test_passwords.py -- Unit tests for auth/passwords.py.
"""

from __future__ import annotations

import pytest

from auth.errors import AuthError, ErrorKind
from auth.passwords import MAX_PASSWORD_BYTES


def test_hash_then_verify_roundtrip(hasher):
    hashed = hasher.hash("correct horse battery staple")
    assert hasher.verify("correct horse battery staple", hashed)
    assert not hasher.verify("Correct horse battery staple", hashed)


def test_hash_is_salted(hasher):
    assert hasher.hash("same") != hasher.hash("same")


def test_hash_uses_bcrypt_format(hasher):
    assert hasher.hash("pw").startswith(b"$2")


def test_empty_password_hashes_and_verifies(hasher):
    hashed = hasher.hash("")
    assert hasher.verify("", hashed)
    assert not hasher.verify("x", hashed)


def test_password_at_limit_is_accepted(hasher):
    password = "a" * MAX_PASSWORD_BYTES
    assert hasher.verify(password, hasher.hash(password))


def test_password_over_limit_is_rejected(hasher):
    with pytest.raises(AuthError) as info:
        hasher.hash("a" * (MAX_PASSWORD_BYTES + 1))
    assert info.value.kind is ErrorKind.INVALID_INPUT


def test_limit_counts_utf8_bytes_not_characters(hasher):
    # 25 x 3-byte chars = 75 bytes
    with pytest.raises(AuthError) as info:
        hasher.hash("€" * 25)
    assert info.value.kind is ErrorKind.INVALID_INPUT


def test_verify_over_limit_returns_false(hasher):
    hashed = hasher.hash("a" * MAX_PASSWORD_BYTES)
    assert hasher.verify("a" * (MAX_PASSWORD_BYTES + 1), hashed) is False


def test_verify_garbage_hash_returns_false(hasher):
    assert hasher.verify("pw", b"not-a-bcrypt-hash") is False


def test_verify_empty_hash_returns_false(hasher):
    assert hasher.verify("pw", b"") is False
