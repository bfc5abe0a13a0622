"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts on a developer machine without any setup.  In a
production deployment you should override these via environment
variables (at least ``SECRET_KEY`` and ``UPLOADS_BASE_URL``).
"""

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Recycle Points API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3333"))

    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    algorithm: str = os.getenv("ALGORITHM", "HS256")

    # Path for the SQLite database.  A relative path is resolved
    # relative to the package directory by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "recycle_points.db")

    # Uploaded point images are written to ``<uploads_dir>/images``.
    # Relative paths resolve the same way as ``database_url``.
    uploads_dir: str = os.getenv("UPLOADS_DIR", "uploads")

    # Public location the uploads directory is served from.  Point
    # images resolve to ``<uploads_base_url>/images/<filename>`` and item
    # icons to ``<uploads_base_url>/<image>``.
    uploads_base_url: str = os.getenv("UPLOADS_BASE_URL", "http://localhost:3333/uploads")

    max_image_bytes: int = int(os.getenv("MAX_IMAGE_BYTES", str(5 * 1024 * 1024)))
    allowed_image_types: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"image/png", "image/jpeg", "image/webp", "image/gif"})
    )

    @property
    def point_images_base_url(self) -> str:
        return f"{self.uploads_base_url.rstrip('/')}/images"


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# should be set before importing this module.
settings = Settings()
