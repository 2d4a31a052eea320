"""
API request and response models for Chirpy REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
chirps/models.py, which own the internal domain representation. Route handlers
map between the two.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import User
from chirps.models import Chirp

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/login.

    No format checks on email: a malformed address is just an unknown
    account, and must fail the same way as one.
    """

    email: str = Field(max_length=255)
    password: str = Field(max_length=255)


class UserCreate(BaseModel):
    """Request body for POST /api/users and PUT /api/users.

    Values are stored exactly as sent, with no whitespace stripping, so the
    same strings work unchanged at POST /api/login.
    """

    email: str = Field(max_length=255)
    password: str = Field(min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def email_has_at_sign(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Invalid email format")
        return value


class ChirpCreate(BaseModel):
    """Request body for POST /api/chirps. Length is checked by the route (400, not 422)."""

    body: str


class PolkaWebhookData(BaseModel):
    user_id: UUID


class PolkaWebhook(BaseModel):
    """Request body for POST /api/polka/webhooks."""

    event: str
    data: PolkaWebhookData


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a User. Never includes the password hash."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
    email: str
    is_chirpy_red: bool

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            created_at=user.created_at,
            updated_at=user.updated_at,
            email=user.email,
            is_chirpy_red=user.is_chirpy_red,
        )


class LoginResponse(UserResponse):
    """Response for POST /api/login: the user plus both tokens."""

    token: str
    refresh_token: str


class RefreshResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class ChirpResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
    body: str
    user_id: UUID

    @classmethod
    def from_chirp(cls, chirp: Chirp) -> "ChirpResponse":
        return cls(
            id=chirp.id,
            created_at=chirp.created_at,
            updated_at=chirp.updated_at,
            body=chirp.body,
            user_id=chirp.user_id,
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/healthz."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
