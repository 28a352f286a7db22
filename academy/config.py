"""Application Configuration"""

from typing import List
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Academy Backend"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600

    # Security & Authentication
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # CORS (8081 = Expo dev server)
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:8081,http://localhost:19006"
    ALLOWED_METHODS: str = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
    ALLOWED_HEADERS: str = "*"

    # Student ID allocation
    COUNTER_BACKEND: str = "sql"
    STUDENT_ID_WIDTH: int = 4
    ALLOCATION_MAX_ATTEMPTS: int = 50  # >= concurrent signups expected on one branch
    ALLOCATION_BACKOFF_BASE_MS: int = 20
    ALLOCATION_BACKOFF_MAX_MS: int = 1000

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    SIGNUP_RATE_LIMIT: str = "10/minute"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list"""
        return [origin.strip() for origin in v.split(",")]

    @field_validator("ALLOWED_METHODS")
    @classmethod
    def parse_methods(cls, v: str) -> List[str]:
        """Parse comma-separated methods into a list"""
        return [method.strip() for method in v.split(",")]

    @field_validator("COUNTER_BACKEND")
    @classmethod
    def check_counter_backend(cls, v: str) -> str:
        """Only the sql and memory counter stores exist"""
        backend = v.strip().lower()
        if backend not in ("sql", "memory"):
            raise ValueError(f"Unknown COUNTER_BACKEND {v!r} (expected 'sql' or 'memory')")
        return backend

    @field_validator("STUDENT_ID_WIDTH", "ALLOCATION_MAX_ATTEMPTS")
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @field_validator("ALLOCATION_BACKOFF_BASE_MS")
    @classmethod
    def check_backoff_base(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1 ms")
        return v

    @model_validator(mode="after")
    def check_backoff_range(self) -> "Settings":
        if self.ALLOCATION_BACKOFF_MAX_MS < self.ALLOCATION_BACKOFF_BASE_MS:
            raise ValueError("ALLOCATION_BACKOFF_MAX_MS must not be below ALLOCATION_BACKOFF_BASE_MS")
        return self

    @model_validator(mode="after")
    def check_backend_for_environment(self) -> "Settings":
        """The memory counter store is not durable and is never allowed in production"""
        if self.is_production and self.COUNTER_BACKEND == "memory":
            raise ValueError("COUNTER_BACKEND=memory cannot be used in production")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"


# Global settings instance
settings = Settings()
