"""
auth/session.py -- Login, refresh and revoke orchestration.

SessionService is the only object the HTTP layer talks to for sessions. It
owns a SessionConfig (secret + TTLs) handed in at construction; nothing in
auth/ reads the secret from a module global or from the environment.

State machine per call:
  login:   Unauthenticated -> AccessGranted + RefreshIssued | Rejected
  refresh: Presented       -> AccessReissued               | Rejected
  revoke:  Presented       -> Revoked                      | Rejected (unknown token)

Security:
  [C1] Unknown email and wrong password are indistinguishable to the caller:
       both raise CREDENTIAL_INVALID with the same message, and the unknown
       email path still runs bcrypt against a dummy hash so response time
       does not reveal which accounts exist.

  Failures after the password check (signing, entropy, persistence) surface
       as their own server-fault kinds, never as CREDENTIAL_INVALID.

  refresh() never rotates the refresh token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from auth.errors import AuthError, ErrorKind
from auth.models import LoginResult, User
from auth.passwords import PasswordHasher
from auth.refresh_tokens import RefreshTokenStore
from auth.store import UserStore
from auth.tokens import AccessTokenCodec
from core.clock import Clock, SystemClock

logger = logging.getLogger("chirpy.auth.session")


@dataclass(frozen=True)
class SessionConfig:
    secret: str = field(repr=False)
    access_token_ttl: timedelta = timedelta(hours=1)
    refresh_token_ttl: timedelta = timedelta(days=60)

    @classmethod
    def from_settings(cls, settings) -> "SessionConfig":
        return cls(
            secret=settings.secret_key,
            access_token_ttl=timedelta(seconds=settings.access_token_ttl_seconds),
            refresh_token_ttl=timedelta(days=settings.refresh_token_ttl_days),
        )


class SessionService:
    """Composes PasswordHasher, AccessTokenCodec and RefreshTokenStore.

    Usage:
        sessions = SessionService(SessionConfig(secret=...), UserStore(url))
        result = sessions.login("a@b.c", "pw")
        access = sessions.refresh(result.refresh_token)
        sessions.revoke(result.refresh_token)
    """

    def __init__(
        self,
        config: SessionConfig,
        store: UserStore,
        hasher: PasswordHasher | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.hasher = hasher or PasswordHasher()
        self.clock = clock or SystemClock()
        self.access_tokens = AccessTokenCodec(self.clock)
        self.refresh_tokens = RefreshTokenStore(store, ttl=config.refresh_token_ttl, clock=self.clock)
        # Timing equalization target for unknown emails [C1].
        self._dummy_hash = self.hasher.hash("chirpy_timing_dummy")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> LoginResult:
        try:
            credential = self.store.get_credential_by_email(email)
        except SQLAlchemyError as exc:
            raise AuthError(ErrorKind.PERSISTENCE_FAILURE, "credential lookup failed") from exc

        if credential is None:
            # Do NOT return before running bcrypt [C1]
            self.hasher.verify(password, self._dummy_hash)
            logger.info("Login rejected: unknown email")
            raise AuthError(ErrorKind.CREDENTIAL_INVALID, "unknown email")
        if not self.hasher.verify(password, credential.password_hash):
            logger.info("Login rejected: wrong password for user %s", credential.identity_id)
            raise AuthError(ErrorKind.CREDENTIAL_INVALID, "password mismatch")

        user = self._load_user(credential.identity_id)
        access_token = self.issue_access_token(user.id)
        refresh_token = self.refresh_tokens.issue(user.id)
        logger.info("Login succeeded for user %s", user.id)
        return LoginResult(user=user, access_token=access_token, refresh_token=refresh_token)

    def refresh(self, refresh_token: str) -> str:
        try:
            identity_id = self.refresh_tokens.resolve(refresh_token)
        except AuthError as exc:
            if exc.kind.is_token_rejection:
                logger.info("Refresh rejected: %s", exc.kind.value)
            raise
        return self.issue_access_token(identity_id)

    def revoke(self, refresh_token: str) -> None:
        try:
            self.refresh_tokens.revoke(refresh_token)
        except AuthError as exc:
            if exc.kind.is_token_rejection:
                logger.info("Revoke rejected: %s", exc.kind.value)
            raise

    # ------------------------------------------------------------------
    # Access tokens
    # ------------------------------------------------------------------

    def issue_access_token(self, identity_id: UUID) -> str:
        return self.access_tokens.issue(identity_id, self.config.secret, self.config.access_token_ttl)

    def authenticate(self, access_token: str) -> UUID:
        """Validate a bearer access token and return its subject."""
        try:
            return self.access_tokens.validate(access_token, self.config.secret)
        except AuthError as exc:
            logger.info("Access token rejected: %s", exc.kind.value)
            raise

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_user(self, identity_id: UUID) -> User:
        try:
            user = self.store.get_by_id(identity_id)
        except SQLAlchemyError as exc:
            raise AuthError(ErrorKind.PERSISTENCE_FAILURE, "user lookup failed") from exc
        if user is None:
            # Credential row existed a moment ago; deleted concurrently.
            raise AuthError(ErrorKind.PERSISTENCE_FAILURE, "user vanished during login")
        return user
