"""Process settings for dbauth.

Values come from, highest priority first:
1. OS environment variables
2. The file named by DBAUTH_ENV_FILE
3. config/.env.dev, for local development
4. config/.env, for deployments

Secrets are SecretStr so they never show up in reprs or logs.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from pydantic import SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_VARIABLE = "DBAUTH_ENV_FILE"
ENV_FILE_NAMES = (".env.dev", ".env")


def _find_project_root() -> Path:
    """Walk up from this file to the directory holding config/ or pyproject.toml."""
    here = Path(__file__).resolve()
    for candidate in here.parents:
        if (candidate / "config").is_dir() or (candidate / "pyproject.toml").is_file():
            return candidate
    return here.parents[2]


def get_config_dir() -> Path:
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """First existing .env file, or None to rely on the environment alone."""
    candidates: list[Path] = []

    explicit = os.environ.get(ENV_FILE_VARIABLE)
    if explicit:
        path = Path(explicit)
        candidates.append(path if path.is_absolute() else _find_project_root() / path)

    candidates.extend(get_config_dir() / name for name in ENV_FILE_NAMES)

    return next((path for path in candidates if path.exists()), None)


class Settings(BaseSettings):
    """dbauth configuration.

    Field names map to upper-case environment variables
    (``session_secret`` is read from ``SESSION_SECRET``).

    Secrets default to empty. An empty secret only fails the operation
    that needs it (session encryption, webhook verification), never
    the process.
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Security
    session_secret: SecretStr = SecretStr("")  # Encrypts the session cookie
    webhook_secret: SecretStr = SecretStr("")  # Signs inbound webhooks

    # Application
    app_name: str = "dbauth"
    debug: bool = False

    # Session cookie
    self_host: str = "http://localhost:8910"
    login_expires_seconds: int = 60 * 60 * 24

    # Dispatch
    auth_route_prefix: str = "/auth"
    csrf_header_name: str = "x-csrf-token"

    # Webhooks
    webhook_signature_header: str = "RW-WEBHOOK-SIGNATURE"
    webhook_tolerance_ms: int = 5 * 60 * 1000

    # Password hashing (PBKDF2 digest and iterations)
    password_hash_algorithm: Literal["sha1", "sha256"] = "sha1"
    password_hash_iterations: int = 1

    # JWT returned by getToken
    jwt_expire_hours: int = 1

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/dbauth.db"

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @field_validator("auth_route_prefix", mode="before")
    @classmethod
    def _validate_route_prefix(cls, v: str) -> str:
        """Normalize the prefix to a leading slash and no trailing slash."""
        v = str(v).strip().rstrip("/")
        if not v:
            msg = "auth_route_prefix must name a path, not the site root"
            raise ValueError(msg)
        if not v.startswith("/"):
            v = "/" + v
        return v

    @field_validator("password_hash_iterations")
    @classmethod
    def _validate_iterations(cls, v: int) -> int:
        if v < 1:
            msg = "password_hash_iterations must be at least 1"
            raise ValueError(msg)
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def site_host(self) -> str:
        """Host name of self_host, used as the session cookie Domain."""
        parsed = urlparse(self.self_host)
        return parsed.hostname or self.self_host


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
