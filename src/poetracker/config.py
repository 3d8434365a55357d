"""
Application Configuration

Uses Pydantic Settings for type-safe environment variable management.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # ========================================================================
    # APPLICATION
    # ========================================================================

    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    DEBUG: bool = False

    # ========================================================================
    # DATABASE
    # ========================================================================

    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="Async SQLAlchemy connection string (in-memory SQLite by default)",
    )

    # ========================================================================
    # AUTH
    # ========================================================================

    SESSION_TTL_HOURS: int = Field(default=24, ge=1, description="Access token lifetime")

    # ========================================================================
    # EVIDENCE FILES
    # ========================================================================

    UPLOAD_DIR: Path = Field(default=Path("uploads"), description="Evidence file storage root")
    EXPORT_DIR: Path = Field(default=Path("exports"), description="Rendered portfolio storage")

    MAX_UPLOAD_SIZE_BYTES: int = 20 * 1024 * 1024
    MAX_FILES_PER_SUBMISSION: int = 10

    # ========================================================================
    # BOOTSTRAP
    # ========================================================================

    SEED_DEMO_DATA: bool = True
    DEFAULT_ADMIN_PASSWORD: str = Field(
        default="password", description="Password for the seeded admin account"
    )

    @field_validator("UPLOAD_DIR", "EXPORT_DIR", mode="before")
    @classmethod
    def validate_storage_dir(cls: type[Settings], v: str | Path) -> Path:  # noqa: ARG003
        """Convert string to Path; directories are created lazily on first write."""
        path = Path(v) if isinstance(v, str) else v

        if path.exists() and not path.is_dir():
            raise ValueError(f"Storage path is not a directory: {path.absolute()}")

        return path

    # ========================================================================
    # COMPUTED PROPERTIES
    # ========================================================================

    @property
    def is_memory_database(self) -> bool:
        """Check if the entity store lives in process memory."""
        url = self.DATABASE_URL
        return url.startswith("sqlite") and (":memory:" in url or url.endswith("://"))

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    @property
    def is_local(self) -> bool:
        """Check if running locally."""
        return self.ENVIRONMENT == "local"


# Global settings instance
settings = Settings()
