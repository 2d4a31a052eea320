"""
api/routes/users.py -- Account registration and self-service updates.

Routes:
  POST /api/users  -- register (public)
  PUT  /api/users  -- change own email and password (access token required)

Passwords are hashed with the SessionService's PasswordHasher so login and
registration always agree on cost factor and length limits.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError

from api.models import UserCreate, UserResponse
from auth.dependencies import get_current_user, get_sessions
from auth.models import User
from auth.store import UserStore

router = APIRouter()


def _email_conflict() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={"code": "conflict", "message": "A user with that email already exists."},
    )


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(request: Request, body: UserCreate) -> UserResponse:
    """Register a new account."""
    user_store: UserStore = request.app.state.user_store
    hashed = get_sessions(request).hasher.hash(body.password)
    try:
        user_id = user_store.create_user(User(email=body.email, hashed_password=hashed))
    except IntegrityError as exc:
        raise _email_conflict() from exc
    return _user_to_response(user_store.get_by_id(user_id))


@router.put("/users", response_model=UserResponse)
def update_user(
    request: Request,
    body: UserCreate,
    current_user: User = Depends(get_current_user),
) -> UserResponse:
    """Replace the caller's email and password.

    Outstanding refresh tokens are left alone; the caller revokes them
    explicitly if the password change is a response to compromise.
    """
    user_store: UserStore = request.app.state.user_store
    hashed = get_sessions(request).hasher.hash(body.password)
    try:
        user_store.update_user(current_user.id, email=body.email, hashed_password=hashed)
    except IntegrityError as exc:
        raise _email_conflict() from exc
    return _user_to_response(user_store.get_by_id(current_user.id))


def _user_to_response(user: User | None) -> UserResponse:
    if user is None:
        raise HTTPException(
            status_code=500,
            detail={"code": "internal_error", "message": "User not found after write."},
        )
    return UserResponse.from_user(user)
