"""
api/limiter.py -- The slowapi Limiter shared by the app and the session routes.

api/main.py mounts it (app.state.limiter + SlowAPIMiddleware); api/routes/auth.py
decorates POST /api/login with @limiter.limit(login_limit), placed under
@router.post so the registered endpoint is the limiting wrapper.

Counters live in RATELIMIT_STORAGE_URI. The in-process "memory://" default is
per worker: two uvicorn workers each allow the full LOGIN_RATE_LIMIT.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri=get_settings().ratelimit_storage_uri)


def login_limit() -> str:
    """LOGIN_RATE_LIMIT from settings, e.g. "10/minute"."""
    return get_settings().login_rate_limit
