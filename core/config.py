"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Chirpy happen here. No module should call
os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY, polka_key -> POLKA_KEY).

  @model_validator(mode="after"): Implements the DEBUG-conditional SECRET_KEY
      rule: dev mode generates a key with a warning, production mode refuses
      to start without one.

Security notes:
  [M6] SECRET_KEY shorter than 32 chars is rejected outright. HS256 signing
       relies on key entropy -- a short key weakens every access token.

  [M7] In production mode (DEBUG not set or false), a missing SECRET_KEY is a
       hard startup failure.

  The secret is declared with repr=False so a logged Settings object never
  carries it.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
or chirps/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("chirpy.config")

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = Field(default="", repr=False)
    # "dev" unlocks POST /admin/reset. Anything else is treated as production.
    platform: str = ""
    # Host header allow-list for TrustedHostMiddleware. JSON list in the env,
    # e.g. ALLOWED_HOSTS='["chirpy.example.com"]'.
    allowed_hosts: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = f"sqlite:///{_PROJECT_ROOT / 'chirpy.db'}"
    static_dir: str = str(_PROJECT_ROOT / "static")

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    access_token_ttl_seconds: int = Field(default=3600, ge=0)
    refresh_token_ttl_days: int = Field(default=60, ge=0)

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------

    # Shared key for the Polka payment provider. Empty = every webhook is 401.
    polka_key: str = Field(default="", repr=False)

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    # limits storage URI, e.g. "redis://localhost:6379" to share counters
    # across workers.
    ratelimit_storage_uri: str = "memory://"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy [M7].

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Access tokens will not survive a restart -- acceptable locally.

        Production mode: refuse to start if SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters [M6].
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Access tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self

    @property
    def is_dev(self) -> bool:
        return self.platform == "dev"


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
