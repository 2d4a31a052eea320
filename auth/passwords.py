"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt]: passlib's wrap-bug detection
feeds bcrypt a >72-byte password, which bcrypt 4.x+ rejects outright.

bcrypt only reads the first 72 bytes of its input. Rather than let two long
passwords that share a 72-byte prefix hash identically, hash() rejects anything
longer with INVALID_INPUT. The limit is on UTF-8 bytes, not characters.
"""

from __future__ import annotations

import bcrypt

from auth.errors import AuthError, ErrorKind

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted one-way hashing with constant-time verification.

    The salt and cost factor are embedded in the output ($2b$<cost>$<salt><hash>)
    so verify() needs nothing but the stored bytes.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, password: str) -> bytes:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise AuthError(
                ErrorKind.INVALID_INPUT,
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes.",
            )
        try:
            return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds))
        except (ValueError, TypeError, OSError) as exc:
            raise AuthError(ErrorKind.HASHING_FAILURE, f"bcrypt hashing failed: {type(exc).__name__}") from exc

    def verify(self, password: str, hashed: bytes) -> bool:
        """Return True if password matches hashed. Never raises.

        A malformed or empty hash, or a password bcrypt could never have
        hashed, is simply a mismatch.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES or not hashed:
            return False
        try:
            return bcrypt.checkpw(encoded, hashed)
        except (ValueError, TypeError):
            return False
