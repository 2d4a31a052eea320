"""
auth/errors.py -- Closed error taxonomy for the session/credential subsystem.

Every failure raised by auth/ carries an ErrorKind. The kind is the only thing
callers branch on; nothing compares message strings or exception identity.

Boundary decoding happens exactly once (api/main.py exception handler):
  - CREDENTIAL_INVALID                    -> 401 "bad_credentials"
  - TOKEN_* (all five)                    -> 401 "invalid_token" (one message,
                                             the specific kind is logged only)
  - INVALID_INPUT                         -> 400 "invalid_input"
  - GENERATION/HASHING/PERSISTENCE_FAILURE -> 500 "internal_error"

Collapsing the token kinds at the boundary keeps clients from learning whether
a token was revoked, expired, forged or never existed.

Layer rule: no imports from api/, chirps/, or core/.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CREDENTIAL_INVALID = "credential_invalid"
    TOKEN_MALFORMED = "token_malformed"
    TOKEN_BAD_SIGNATURE = "token_bad_signature"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_REVOKED = "token_revoked"
    TOKEN_NOT_FOUND = "token_not_found"
    GENERATION_FAILURE = "generation_failure"
    HASHING_FAILURE = "hashing_failure"
    PERSISTENCE_FAILURE = "persistence_failure"
    INVALID_INPUT = "invalid_input"

    @property
    def is_token_rejection(self) -> bool:
        return self in _TOKEN_KINDS

    @property
    def is_server_fault(self) -> bool:
        return self in _SERVER_KINDS

    @property
    def http_status(self) -> int:
        if self is ErrorKind.INVALID_INPUT:
            return 400
        if self.is_server_fault:
            return 500
        return 401

    @property
    def public_code(self) -> str:
        if self is ErrorKind.CREDENTIAL_INVALID:
            return "bad_credentials"
        if self.is_token_rejection:
            return "invalid_token"
        if self is ErrorKind.INVALID_INPUT:
            return "invalid_input"
        return "internal_error"


_TOKEN_KINDS = frozenset(
    {
        ErrorKind.TOKEN_MALFORMED,
        ErrorKind.TOKEN_BAD_SIGNATURE,
        ErrorKind.TOKEN_EXPIRED,
        ErrorKind.TOKEN_REVOKED,
        ErrorKind.TOKEN_NOT_FOUND,
    }
)

_SERVER_KINDS = frozenset(
    {
        ErrorKind.GENERATION_FAILURE,
        ErrorKind.HASHING_FAILURE,
        ErrorKind.PERSISTENCE_FAILURE,
    }
)

# Messages safe to show a client. Server faults never echo internal detail.
_PUBLIC_MESSAGES: dict[str, str] = {
    "bad_credentials": "Incorrect email or password.",
    "invalid_token": "Invalid or expired token.",
    "internal_error": "An unexpected error occurred.",
}


class AuthError(Exception):
    """A classified failure from the session/credential subsystem.

    message is the internal diagnostic (safe to log, never contains secrets or
    token values). public_message is what the HTTP layer may return.
    """

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value

    @property
    def public_message(self) -> str:
        if self.kind is ErrorKind.INVALID_INPUT:
            return self.message
        return _PUBLIC_MESSAGES[self.kind.public_code]

    def __repr__(self) -> str:
        return f"AuthError({self.kind.name}, {self.message!r})"
