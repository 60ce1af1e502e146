"""
core/config.py -- Stockroom settings, read once from the environment.

Every environment variable the service understands is a field on Settings.
Nothing else in the tree reads os.environ; the process edges (the lifespan
in api/main.py and the CLI in main.py) call get_settings() and hand plain
values to the components they build. Tests skip the cache entirely and
construct Settings(...) with explicit overrides.

Values come from the environment first, then an optional .env file. Field
names are matched case-insensitively, so secret_key is set by SECRET_KEY.

SECRET_KEY policy, enforced after all fields are loaded:
  - DEBUG=true and no key: a random key is generated and a warning logged.
    Tokens then stop verifying after a restart, which is fine locally.
  - DEBUG unset/false and no key: startup fails. A per-restart random key in
    production would invalidate every token on each deploy.
  - Any key under 32 characters is rejected; HS256 tokens are only as strong
    as the key that signs them.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
catalog/, or storage/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("stockroom.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'storage' / 'stockroom.db'}"


class Settings(BaseSettings):
    """Every tunable of the service. All fields default, so Settings() works with no .env."""

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
    secret_key: str = ""
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Tokens live for 24 hours; there is no refresh flow and no revocation.
    token_expire_seconds: int = Field(default=86400, gt=0)
    # bcrypt work factor. 4 is bcrypt's floor and only suitable for tests.
    bcrypt_rounds: int = Field(default=8, ge=4, le=31)

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL
    seed_on_startup: bool = True
    admin_password: str = "admin"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Apply the SECRET_KEY policy described in the module docstring."""
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning(
                    "WARNING: Using auto-generated SECRET_KEY. " "Tokens will not stay valid across restarts."
                )
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
