# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "chama-api")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")

    # Store backend: memory | file | sql | github | sheets
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "file").lower()
    DATA_DIR: str = os.getenv("DATA_DIR", "./data")
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./chama.db")
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    GITHUB_TOKEN: str = os.getenv("GITHUB_TOKEN", "")
    GITHUB_REPO: str = os.getenv("GITHUB_REPO", "")
    GITHUB_BRANCH: str = os.getenv("GITHUB_BRANCH", "main")
    GITHUB_DATA_PATH: str = os.getenv("GITHUB_DATA_PATH", "data")
    GITHUB_API_URL: str = os.getenv("GITHUB_API_URL", "https://api.github.com")

    GOOGLE_CREDENTIALS_PATH: str = os.getenv("GOOGLE_CREDENTIALS_PATH", "")
    GOOGLE_SHEETS_ID: str = os.getenv("GOOGLE_SHEETS_ID", "")

    STORE_TIMEOUT: float = float(os.getenv("STORE_TIMEOUT", "10.0"))
    # Retries after the first failed read (writes are never retried)
    STORE_RETRY_MAX_ATTEMPTS: int = int(os.getenv("STORE_RETRY_MAX_ATTEMPTS", "2"))
    STORE_RETRY_BACKOFF_BASE: float = float(os.getenv("STORE_RETRY_BACKOFF_BASE", "0.3"))

    # Auth
    JWT_SECRET: str = os.getenv("JWT_SECRET", "supersecret_change_in_prod")
    JWT_ALGORITHM: str = "HS256"
    TOKEN_TTL_SECONDS: int = int(os.getenv("TOKEN_TTL_SECONDS", "3600"))
    RESET_PIN: str = os.getenv("RESET_PIN", "0000")


settings = Settings()
