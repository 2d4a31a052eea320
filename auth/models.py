"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; these only own the shape.

Layer rule: no imports from api/, chirps/, or core/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass
class User:
    """A registered account.

    hashed_password holds the bcrypt output as bytes. It is never serialized
    to a response; api/models.py builds UserResponse from the other fields.

    is_chirpy_red is flipped by the Polka "user.upgraded" webhook.
    """

    email: str
    hashed_password: bytes = field(repr=False)
    id: UUID | None = None
    is_chirpy_red: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Credential:
    """The slice of a User the password check needs, and nothing more."""

    identity_id: UUID
    password_hash: bytes = field(repr=False)


@dataclass
class RefreshToken:
    """A persisted, revocable, opaque session credential.

    Lifecycle: inserted at login, read on every refresh, updated exactly once
    when revoked. revoked_at is never cleared -- there is no un-revoke.
    """

    token: str = field(repr=False)
    identity_id: UUID
    created_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None


@dataclass
class LoginResult:
    """What a successful SessionService.login() hands back to the HTTP layer."""

    user: User
    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)
