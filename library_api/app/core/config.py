"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts without any configuration; in a production deployment you
should at least override ``SECRET_KEY`` and ``DATABASE_URL``.

Other modules read attributes from the shared ``settings`` instance
at call time, which lets tests point the database and blob storage at
temporary locations by plain attribute assignment.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Library API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    api_prefix: str = os.getenv("API_PREFIX", "/api/v1")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Token signing.  Access tokens authenticate requests; refresh tokens
    # are only good for minting new access tokens and therefore live longer.
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    refresh_token_expire_minutes: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 14)))

    # Path or connection string for the SQLite database.  If a relative
    # path is provided, it will be resolved relative to the project root
    # by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "library.db")

    # Blob storage for profile images.  ``storage_dir`` is resolved like
    # ``database_url``; ``storage_url`` is the public prefix under which
    # the application serves stored files.
    storage_dir: str = os.getenv("STORAGE_DIR", "storage")
    storage_url: str = os.getenv("STORAGE_URL", "/storage")
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024)))

    # Maximum number of contacts a single user may own.  ``0`` disables
    # the limit; ``1`` gives the one‑contact‑per‑user behaviour.
    max_contacts_per_user: int = int(os.getenv("MAX_CONTACTS_PER_USER", "0"))

    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at class definition time, environment variables should
# be set before importing this module.
settings = Settings()
