"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts against a local MongoDB without any setup.  In a
production deployment you should override at least ``SECRET_KEY``,
``MONGODB_URI`` and the seed credentials.
"""

import os
from dataclasses import dataclass, field
from typing import List
from urllib.parse import urlparse


def _bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _db_name_from_uri(uri: str, default: str = "rip-fitness") -> str:
    """Return the database name encoded in the URI path, if any."""
    path = urlparse(uri).path.lstrip("/")
    return path or default


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "RIP Fitness API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _bool(os.getenv("DEBUG", "false"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # MongoDB connection.  The database name defaults to the path
    # component of the URI (``/rip-fitness``) unless MONGODB_DB_NAME is set.
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017/rip-fitness")
    mongodb_db_name: str = os.getenv("MONGODB_DB_NAME", "")
    mongodb_max_pool_size: int = int(os.getenv("MONGODB_MAX_POOL_SIZE", "10"))
    mongodb_server_selection_timeout_ms: int = int(os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "5000"))
    mongodb_socket_timeout_ms: int = int(os.getenv("MONGODB_SOCKET_TIMEOUT_MS", "45000"))

    # Accounts created by the initial setup seed.
    super_admin_email: str = os.getenv("SUPER_ADMIN_EMAIL", "superadmin@ripfitness.com")
    super_admin_password: str = os.getenv("SUPER_ADMIN_PASSWORD", "SuperAdmin@123")
    admin_email: str = os.getenv("ADMIN_EMAIL", "admin@ripfitness.com")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "Admin@123")
    seed_on_startup: bool = _bool(os.getenv("SEED_ON_STARTUP", "false"))

    # Comma-separated list of allowed CORS origins; ``*`` allows any.
    cors_origins: List[str] = field(
        default_factory=lambda: [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    )

    def __post_init__(self) -> None:
        if not self.mongodb_db_name:
            self.mongodb_db_name = _db_name_from_uri(self.mongodb_uri)


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must be set before this module is first imported.
settings = Settings()
