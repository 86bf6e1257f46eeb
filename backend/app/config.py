"""Configuration management for the image job service."""

import os
from pathlib import Path


class Settings:
    """Application settings loaded from environment variables."""

    # Paths
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "./data/app.db")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", f"sqlite+aiosqlite:///{DATABASE_PATH}"
    )

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "2022"))

    # CORS
    CORS_ORIGINS: list = os.getenv("CORS_ORIGINS", "*").split(",")

    # Storage (no real object store, URLs are fabricated under this base)
    STORAGE_BASE_URL: str = os.getenv(
        "STORAGE_BASE_URL", "https://storage.example.com"
    ).rstrip("/")

    # Upload limits
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    MIN_UPLOAD_BYTES: int = 10

    # Simulated background removal keeps this share of the original size
    PROCESSED_SIZE_PERCENT: int = 70

    @classmethod
    def ensure_directories(cls):
        """Ensure the database directory exists for file-backed SQLite."""
        if cls.DATABASE_URL.startswith("sqlite") and ":memory:" not in cls.DATABASE_URL:
            Path(cls.DATABASE_PATH).parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
