"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
application starts without any configuration in a development
checkout.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "User Admin API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Location of the JSON document holding every user record.  A
    # relative path is resolved against the project root by
    # ``core.storage``.
    users_file: str = os.getenv("USERS_FILE", os.path.join("data", "users.json"))

    # Ceiling for the decoded size of an inlined avatar image.
    avatar_max_bytes: int = int(os.getenv("AVATAR_MAX_BYTES", str(2 * 1024 * 1024)))

    # When enabled, an unreadable users document is reported as a
    # storage failure instead of being treated as an empty collection.
    strict_storage_reads: bool = _env_flag("STRICT_STORAGE_READS")

    # When enabled, ``PUT /users/{id}`` rejects a login that already
    # belongs to another record.  Off by default: updates historically
    # never re-checked uniqueness.
    unique_login_on_update: bool = _env_flag("UNIQUE_LOGIN_ON_UPDATE")

    cors_allowed_origins: List[str] = field(
        default_factory=lambda: _env_list(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000",
        )
    )

    admin_host: str = os.getenv("ADMIN_HOST", "0.0.0.0")
    admin_port: int = int(os.getenv("ADMIN_PORT", "8000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
