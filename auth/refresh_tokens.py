"""
auth/refresh_tokens.py -- Opaque, persisted, revocable refresh tokens.

Security design decisions:
  Generation: secrets.token_hex(32) -- 32 bytes from the OS CSPRNG, hex
       encoded to 64 chars (256 bits of entropy). Collisions are treated as
       impossible, so there is no retry loop; the PRIMARY KEY on
       refresh_tokens.token still turns a duplicate into a hard failure.

  Resolution distinguishes NOT_FOUND, REVOKED and EXPIRED so the logs say
       which one happened. The API layer collapses all three into a single
       "Invalid or expired token." response. A token that is both revoked
       and expired reports REVOKED.

  Lookup shape: anything that is not 64 lowercase hex chars cannot have been
       issued here and is NOT_FOUND without a query.

  revoke() is idempotent for known tokens. The first revoked_at is kept.

  No rotation on use: the same refresh token keeps working until it expires
       or is revoked.

Layer rule: no imports from api/ or chirps/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import re
import secrets
from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import AuthError, ErrorKind
from auth.models import RefreshToken
from auth.store import UserStore
from core.clock import Clock, SystemClock

logger = logging.getLogger("chirpy.auth.refresh_tokens")

TOKEN_BYTES = 32
DEFAULT_TTL = timedelta(days=60)

_TOKEN_RE = re.compile(r"[0-9a-f]{%d}" % (TOKEN_BYTES * 2))


def generate_refresh_token() -> str:
    """Return 64 hex chars of CSPRNG output.

    Raises AuthError(GENERATION_FAILURE) if the OS entropy source fails.
    """
    try:
        return secrets.token_hex(TOKEN_BYTES)
    except (OSError, NotImplementedError) as exc:
        raise AuthError(ErrorKind.GENERATION_FAILURE, "entropy source unavailable") from exc


class RefreshTokenStore:
    """Issues, resolves and revokes refresh tokens on top of UserStore."""

    def __init__(self, store: UserStore, ttl: timedelta = DEFAULT_TTL, clock: Clock | None = None) -> None:
        self.store = store
        self.ttl = ttl
        self.clock = clock or SystemClock()

    def issue(self, identity_id: UUID) -> str:
        token = generate_refresh_token()
        now = self.clock.now()
        record = RefreshToken(
            token=token,
            identity_id=identity_id,
            created_at=now,
            expires_at=now + self.ttl,
        )
        try:
            self.store.insert_refresh_token(record)
        except IntegrityError as exc:
            raise AuthError(ErrorKind.PERSISTENCE_FAILURE, "duplicate refresh token rejected by store") from exc
        except SQLAlchemyError as exc:
            raise AuthError(ErrorKind.PERSISTENCE_FAILURE, "refresh token insert failed") from exc
        logger.debug("Issued refresh token for user %s (expires %s)", identity_id, record.expires_at.isoformat())
        return token

    def resolve(self, token: str) -> UUID:
        """Return the owning identity of a live refresh token.

        Raises AuthError with TOKEN_NOT_FOUND, TOKEN_REVOKED or TOKEN_EXPIRED.
        """
        record = self._lookup(token)
        if record.revoked_at is not None:
            raise AuthError(ErrorKind.TOKEN_REVOKED, "refresh token revoked")
        if self.clock.now() >= record.expires_at:
            raise AuthError(ErrorKind.TOKEN_EXPIRED, "refresh token expired")
        return record.identity_id

    def revoke(self, token: str) -> None:
        """Revoke a refresh token. Revoking an already-revoked token succeeds.

        Raises AuthError(TOKEN_NOT_FOUND) if the token was never issued.
        """
        if not _TOKEN_RE.fullmatch(token or ""):
            raise AuthError(ErrorKind.TOKEN_NOT_FOUND, "refresh token has invalid shape")
        try:
            found = self.store.mark_refresh_token_revoked(token, self.clock.now())
        except SQLAlchemyError as exc:
            raise AuthError(ErrorKind.PERSISTENCE_FAILURE, "refresh token revoke failed") from exc
        if not found:
            raise AuthError(ErrorKind.TOKEN_NOT_FOUND, "refresh token unknown")

    def _lookup(self, token: str) -> RefreshToken:
        if not _TOKEN_RE.fullmatch(token or ""):
            raise AuthError(ErrorKind.TOKEN_NOT_FOUND, "refresh token has invalid shape")
        try:
            record = self.store.get_refresh_token(token)
        except SQLAlchemyError as exc:
            raise AuthError(ErrorKind.PERSISTENCE_FAILURE, "refresh token lookup failed") from exc
        if record is None:
            raise AuthError(ErrorKind.TOKEN_NOT_FOUND, "refresh token unknown")
        return record
