"""
Application Configuration

Environment-driven settings via pydantic-settings.
Values come from environment variables or an optional .env file.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    python_env: str = "development"
    log_level: str = "INFO"

    # Database (Document Store)
    database_url: str = "sqlite+aiosqlite:///./astro.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Object Store (MinIO / S3-compatible)
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_secure: bool = False
    minio_bucket: str = "applications"

    # HTTP
    cors_origins: str = "http://localhost:3000"
    max_body_bytes: int = 10 * 1024 * 1024

    # Rate limiting for POST /api/apply
    apply_rate_limit: int = 10
    apply_rate_window_seconds: int = 60
    # Only enable behind a reverse proxy that sets X-Forwarded-For itself
    trust_proxy_headers: bool = False

    # Email
    resend_api_key: str | None = None
    email_from: str = "ALU Astronomy Club <noreply@aluastronomy.club>"

    @property
    def is_production(self) -> bool:
        return self.python_env.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.python_env.lower() == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
