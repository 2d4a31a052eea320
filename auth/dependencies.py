"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Protected routes authenticate with an access token in
'Authorization: Bearer <jwt>'. Refresh tokens are never accepted here;
they are only meaningful to POST /api/refresh and POST /api/revoke.

get_current_user_id() raises HTTP 401 when the header is absent or not a
Bearer credential, and lets AuthError propagate when the token itself is
rejected (the api/ exception handler maps that to 401 "invalid_token").

Layer rule: no imports from api/ or chirps/.
  auth/dependencies.py may import from fastapi (for Request/HTTPException)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import HTTPException, Request

from auth.errors import AuthError
from auth.models import User
from auth.session import SessionService
from auth.tokens import get_bearer_token


def get_sessions(request: Request) -> SessionService:
    return request.app.state.sessions


def get_current_user_id(request: Request) -> UUID:
    """Require a valid access token. Returns the token's subject.

    Use as a FastAPI dependency:
        @router.post("/chirps")
        def route(user_id: UUID = Depends(get_current_user_id)): ...
    """
    try:
        token = get_bearer_token(request.headers.get("Authorization"))
    except AuthError as exc:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": exc.message},
        ) from exc
    return get_sessions(request).authenticate(token)


def get_current_user(request: Request) -> User:
    """Like get_current_user_id(), but also loads the User row.

    A valid token for a deleted account is treated as unauthenticated.
    """
    user_id = get_current_user_id(request)
    user = request.app.state.user_store.get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user
