"""Application configuration."""

from typing import List, Optional

from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings."""

    # Environment
    environment: str = "development"  # development, staging, production

    # API Configuration
    backend_host: str = "0.0.0.0"
    backend_port: int = 5000
    cors_origins: str = (
        "http://localhost:3000,http://127.0.0.1:3000,"
        "http://localhost:4173,http://127.0.0.1:4173"
    )

    # Frontend URL - the only allowed origin in production
    frontend_url: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.is_production:
            return [self.frontend_url]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    # App database (users, stores)
    database_url: str = "sqlite+aiosqlite:///./visiora.db"

    # Logging
    log_level: str = "INFO"
    log_format: str = "development"  # "development" for readable, "json" for structured

    # Encryption - 64 hex chars (AES-256). Validated when the cipher is built at startup.
    encryption_key: str = ""

    # Shopify Admin API
    shopify_api_version: str = "2024-07"
    shopify_fallback_versions: str = "2023-07,2023-01,2022-10,2022-07"
    shopify_oldest_api_version: str = "2020-01"
    shopify_request_timeout: Optional[float] = None  # None = no timeout

    @property
    def shopify_fallback_versions_list(self) -> List[str]:
        """Fallback API versions, tried in order after a 404."""
        return [v.strip() for v in self.shopify_fallback_versions.split(",") if v.strip()]

    # Dashboard behaviour
    mock_fallback_enabled: bool = True  # Serve sample data when Shopify returns nothing
    report_upstream_failures: bool = False  # Respond 502 instead of mock data on upstream failure
    dashboard_window_days: int = 30

    # Application version (for health checks)
    version: str = "1.0.0"

    @field_validator("encryption_key", mode="before")
    @classmethod
    def strip_encryption_key(cls, v: Optional[str]) -> str:
        """Normalize surrounding whitespace from .env files."""
        return (v or "").strip()

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
