"""
api/routes/auth.py -- Session endpoints.

Routes:
  POST /api/login    -- email + password -> user, access token, refresh token
  POST /api/refresh  -- Bearer <refresh token> -> new access token
  POST /api/revoke   -- Bearer <refresh token> -> 204

Security:
  [H2] POST /login is rate-limited per IP (LOGIN_RATE_LIMIT, default 10/minute).
  [C1] SessionService.login() provides timing equalization -- never inline
       the credential lookup + verify here.
  [M5] Cache-Control: no-store on every response that carries a token.

Failures are raised as AuthError and decoded once by the handler in
api/main.py: bad credentials -> 401 bad_credentials, any token rejection ->
401 invalid_token, malformed Authorization header -> 400.
"""

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_limit
from api.models import LoginRequest, LoginResponse, RefreshResponse, UserResponse
from auth.dependencies import get_sessions
from auth.tokens import get_bearer_token

# Auth policy:
# - POST /api/login:   public -- login endpoint must be unauthenticated
# - POST /api/refresh: refresh token in Authorization header
# - POST /api/revoke:  refresh token in Authorization header
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@limiter.limit(login_limit)  # [H2] brute-force mitigation
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return both tokens.

    The same error is returned for an unknown email and a wrong password.
    """
    result = get_sessions(request).login(body.email, body.password)
    payload = LoginResponse(
        **UserResponse.from_user(result.user).model_dump(),
        token=result.access_token,
        refresh_token=result.refresh_token,
    )
    resp = JSONResponse(status_code=200, content=payload.model_dump(mode="json"))
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post("/refresh", response_model=RefreshResponse)
def refresh(request: Request) -> JSONResponse:
    """Exchange a live refresh token for a new access token.

    The refresh token itself is not rotated; the caller keeps using it.
    """
    refresh_token = get_bearer_token(request.headers.get("Authorization"))
    access_token = get_sessions(request).refresh(refresh_token)
    resp = JSONResponse(status_code=200, content=RefreshResponse(token=access_token).model_dump())
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post("/revoke", status_code=204)
def revoke(request: Request) -> Response:
    """Revoke a refresh token. Revoking an already-revoked token is a no-op 204."""
    refresh_token = get_bearer_token(request.headers.get("Authorization"))
    get_sessions(request).revoke(refresh_token)
    return Response(status_code=204)
