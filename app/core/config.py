"""
Application configuration management using Pydantic Settings.
All settings can be overridden via environment variables or a ``.env`` file.
"""

from pathlib import Path
from typing import Any, List, Optional

from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "Bank Order Processing System"
    VERSION: str = "0.1.0"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"  # "development" exposes reset tokens in responses

    # Tokens
    SECRET_KEY: str = "change-this-secret"
    REFRESH_SECRET_KEY: str = "change-this-refresh-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Account lockout and password recovery
    MAX_LOGIN_ATTEMPTS: int = 5
    LOCK_TIME_MINUTES: int = 15
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60

    # Database: DATABASE_URL wins, then POSTGRES_*, then a local SQLite file
    DATABASE_URL: Optional[str] = None
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    SQLITE_PATH: str = "./data/bank_orders.db"

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if all((self.POSTGRES_SERVER, self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_DB)):
            return URL.create(
                "postgresql",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                port=self.POSTGRES_PORT,
                database=self.POSTGRES_DB,
            ).render_as_string(hide_password=False)
        return f"sqlite:///{self.SQLITE_PATH}"

    @property
    def is_sqlite(self) -> bool:
        return self.SQLALCHEMY_DATABASE_URI.startswith("sqlite")

    @property
    def sqlite_file(self) -> Optional[Path]:
        """On-disk SQLite database file, or ``None`` for in-memory and server databases."""
        if not self.is_sqlite:
            return None
        database = make_url(self.SQLALCHEMY_DATABASE_URI).database
        if not database or database == ":memory:":
            return None
        return Path(database)

    # CORS; disabled when empty
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> List[str] | str:
        """Accept a comma-separated string as well as a JSON list."""
        if isinstance(v, str) and not v.startswith("["):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # First admin, created on startup unless disabled
    DISABLE_BOOTSTRAP_USERS: bool = False
    FIRST_SUPERUSER_EMAIL: str = "admin@bank.com"
    FIRST_SUPERUSER_PASSWORD: str = "Admin123!"

    @field_validator("FIRST_SUPERUSER_PASSWORD", mode="after")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Bcrypt only looks at the first 72 bytes of a password."""
        size = len(v.encode("utf-8"))
        if size > 72:
            raise ValueError(f"FIRST_SUPERUSER_PASSWORD is {size} bytes; bcrypt allows at most 72")
        if size < 6:
            raise ValueError("FIRST_SUPERUSER_PASSWORD must be at least 6 characters")
        return v

    # Logging
    AUDIT_LOG_FILE: Optional[str] = None  # e.g. ./logs/audit.log


settings = Settings()
