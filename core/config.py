"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for the Zela API happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. jwt_secret -> JWT_SECRET). Type coercion and validation are built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. A missing JWT_SECRET or DATABASE_URL is a
      hard startup failure -- there is no built-in fallback secret.

Security notes:
  JWT_SECRET shorter than 32 chars is rejected outright. HS256 signing relies
  on key entropy -- a short key weakens every token the service issues.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or stats/.
"""

import logging
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("zela.config")

# Heroku-style URLs use the "postgres" scheme, which SQLAlchemy 1.4+ rejects.
_LEGACY_PG_SCHEME = "postgres://"

# Levels both stdlib logging and uvicorn understand.
_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `database_url` reads from DATABASE_URL, `port` reads from PORT.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured"; the validator below
    # refuses to start in that case.
    database_url: str = ""

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    jwt_secret: str = ""
    token_expire_seconds: int = 24 * 60 * 60

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str = "0.0.0.0"  # noqa: S104 # nosec B104 -- container deployments bind all interfaces
    port: int = 3001
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, value: str) -> str:
        """Rewrite postgres:// to postgresql:// so SQLAlchemy can load the dialect."""
        if value.startswith(_LEGACY_PG_SCHEME):
            return "postgresql://" + value[len(_LEGACY_PG_SCHEME) :]
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Uppercase LOG_LEVEL and reject names logging.setLevel would refuse."""
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(_LOG_LEVELS)}.")
        return level

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Refuse to start without a database URL or a signing secret."""
        if not self.database_url:
            raise ValueError("DATABASE_URL is required. Set it in your environment or .env file.")
        if not self.jwt_secret:
            raise ValueError("JWT_SECRET is required. Set it in your environment or .env file.")
        if len(self.jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters.")
        if self.token_expire_seconds <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
