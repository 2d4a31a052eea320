"""
auth/tokens.py -- HS256 access tokens and Authorization header parsing.

Security design decisions:
  JWT: python-jose with HS256. A token carries iss="chirpy", sub=<user UUID>,
       iat and exp as integer epoch seconds. Anyone holding the secret can
       verify it without a DB lookup; nothing can revoke it before exp, so the
       TTL stays short (1 hour by default).

  Validation order matters. The token is first checked structurally (three
       segments, decodable header and claims, alg pinned to HS256, claim
       types) and only then is the signature checked. A token whose header
       says alg=none or RS256 is MALFORMED before any key is touched.

  Expiry is judged against the injected Clock, not python-jose's own
       datetime.utcnow(), so tests and the refresh-token store agree on "now".
       exp is inclusive: a token is expired at the instant now >= exp. A TTL of
       zero therefore produces a token that is already expired.

  The secret is an argument to issue()/validate(), never read from a module
       global. SessionService holds it in its SessionConfig.

Layer rule: no imports from api/ or chirps/. Import from core/ is allowed.
"""

from __future__ import annotations

from datetime import timedelta
from uuid import UUID

from jose import jws, jwt
from jose.exceptions import JOSEError, JWSError, JWTError

from auth.errors import AuthError, ErrorKind
from core.clock import Clock, SystemClock

ISSUER = "chirpy"
ALGORITHM = "HS256"


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class AccessTokenCodec:
    """Signs and verifies compact, time-bounded identity tokens."""

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or SystemClock()

    def issue(self, identity_id: UUID, secret: str, ttl: timedelta) -> str:
        """Return a signed JWT asserting identity_id until now + ttl.

        Raises AuthError(GENERATION_FAILURE) if signing fails.
        """
        if ttl < timedelta(0):
            raise ValueError("ttl must not be negative")
        issued_at = int(self.clock.now().timestamp())
        claims = {
            "iss": ISSUER,
            "sub": str(identity_id),
            "iat": issued_at,
            "exp": issued_at + int(ttl.total_seconds()),
        }
        try:
            return jwt.encode(claims, secret, algorithm=ALGORITHM)
        except JOSEError as exc:
            raise AuthError(ErrorKind.GENERATION_FAILURE, "access token signing failed") from exc

    def validate(self, token: str, secret: str) -> UUID:
        """Return the subject UUID of a valid token.

        Raises AuthError with TOKEN_MALFORMED, TOKEN_BAD_SIGNATURE or
        TOKEN_EXPIRED, in that order of checking.
        """
        claims = self._unverified_claims(token)

        try:
            jws.verify(token, secret, algorithms=[ALGORITHM])
        except JWSError as exc:
            raise AuthError(ErrorKind.TOKEN_BAD_SIGNATURE, "access token signature mismatch") from exc

        if claims.get("iss") != ISSUER:
            raise AuthError(ErrorKind.TOKEN_MALFORMED, "access token issuer mismatch")

        if self.clock.now().timestamp() >= claims["exp"]:
            raise AuthError(ErrorKind.TOKEN_EXPIRED, "access token expired")

        return UUID(claims["sub"])

    def _unverified_claims(self, token: str) -> dict:
        """Structural checks only. Nothing here proves authenticity."""
        if not isinstance(token, str) or token.count(".") != 2:
            raise AuthError(ErrorKind.TOKEN_MALFORMED, "access token is not a compact JWS")
        try:
            header = jwt.get_unverified_header(token)
            claims = jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise AuthError(ErrorKind.TOKEN_MALFORMED, "access token segments do not decode") from exc

        if header.get("alg") != ALGORITHM:
            raise AuthError(ErrorKind.TOKEN_MALFORMED, "access token algorithm not accepted")
        if not isinstance(claims, dict):
            raise AuthError(ErrorKind.TOKEN_MALFORMED, "access token claims are not an object")
        if not _is_int(claims.get("exp")) or not _is_int(claims.get("iat")):
            raise AuthError(ErrorKind.TOKEN_MALFORMED, "access token is missing iat/exp")
        sub = claims.get("sub")
        if not isinstance(sub, str):
            raise AuthError(ErrorKind.TOKEN_MALFORMED, "access token subject missing")
        try:
            UUID(sub)
        except ValueError as exc:
            raise AuthError(ErrorKind.TOKEN_MALFORMED, "access token subject is not a UUID") from exc
        return claims


# ---------------------------------------------------------------------------
# Authorization header parsing
# ---------------------------------------------------------------------------


def get_authorization_credential(header_value: str | None, scheme: str) -> str:
    """Extract the credential from 'Authorization: <scheme> <credential>'.

    The scheme comparison is case-insensitive ("bearer", "Bearer", "BEARER").
    A missing header, wrong scheme or empty credential is INVALID_INPUT.
    """
    if not header_value:
        raise AuthError(ErrorKind.INVALID_INPUT, "Missing authorization header.")
    parts = header_value.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != scheme.lower() or not parts[1].strip():
        raise AuthError(ErrorKind.INVALID_INPUT, "Invalid authorization header format.")
    return parts[1].strip()


def get_bearer_token(header_value: str | None) -> str:
    return get_authorization_credential(header_value, "Bearer")


def get_api_key(header_value: str | None) -> str:
    return get_authorization_credential(header_value, "ApiKey")
