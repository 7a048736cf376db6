"""
Hospital Auth - Configuration Management

Centralized configuration using Pydantic Settings.
All secrets and connection strings are loaded from environment variables.

Security: No secrets are hardcoded. Use .env for local development.
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        SECRET_KEY: JWT signing key for session tokens
        JWT_ALGORITHM: Symmetric signing algorithm
        ACCESS_TOKEN_EXPIRE_MINUTES: Session token lifetime
        BCRYPT_ROUNDS: bcrypt work factor for new password hashes
        DATABASE_URL: Account store connection string
        DB_POOL_SIZE: Persistent connections kept in the pool
        DB_MAX_OVERFLOW: Extra connections allowed under load
        DB_POOL_TIMEOUT: Seconds to wait for a free connection
        ALLOWED_ORIGINS: CORS allowed origins
        API_BASE_URL: Server URL used by the client package
    """

    # Security
    SECRET_KEY: str = ""  # Must be set via environment
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    BCRYPT_ROUNDS: int = 12

    # Account store (MySQL/PostgreSQL in production, SQLite for development)
    DATABASE_URL: str = "sqlite:///./hopital.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 10

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:8081", "http://localhost:19006"]

    # Logging
    LOG_LEVEL: str = "INFO"

    # Client
    API_BASE_URL: str = "http://localhost:8000"
    CLIENT_TIMEOUT_SECONDS: float = 10.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
