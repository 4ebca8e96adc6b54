"""
Centralized configuration with validation.

Uses pydantic-settings to load and validate all environment variables at startup.
Fail fast with clear error messages if required config is missing.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = Field(
        ...,
        description="Database connection URL (PostgreSQL in production, SQLite for tests)",
    )

    # Storage
    STORAGE_PROVIDER: str = Field(
        default="s3",
        description="Storage provider: s3, local",
    )
    LOCAL_STORAGE_PATH: str = Field(
        default="./storage",
        description="Path for local storage provider",
    )
    S3_BUCKET: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_REGION: str = Field(default="us-east-1")
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None

    # Cover assets
    ASSET_NAMESPACE: str = Field(
        default="blog-posts",
        description="Fixed namespace (key prefix) for post cover images",
    )
    ASSET_PUBLIC_BASE_URL: str = Field(
        default="http://localhost:4000/assets",
        description="Base URL that asset references are built from",
    )
    MAX_ASSET_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Maximum accepted cover image size in bytes",
    )
    ALLOWED_ASSET_EXTENSIONS: str = Field(
        default="jpg,jpeg,png,gif",
        description="Comma-separated list of accepted cover image extensions",
    )

    # Posts
    POST_LIST_LIMIT: int = Field(
        default=20,
        description="Default and maximum number of posts returned by the listing",
    )

    # CORS
    CORS_ORIGINS: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins",
    )

    # Application
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(
        default=True,
        description="Emit single-line JSON logs (disable for local development)",
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but SQLAlchemy needs postgresql+psycopg2://"""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+psycopg2://", 1)
        return v

    @field_validator("STORAGE_PROVIDER")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        name = v.lower().strip()
        if name not in ("s3", "local"):
            raise ValueError(f"Unknown storage provider: {v}. Available: s3, local")
        return name

    @field_validator("ASSET_NAMESPACE")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        namespace = v.strip("/")
        if not namespace:
            raise ValueError("ASSET_NAMESPACE must not be empty")
        return namespace

    @field_validator("ASSET_PUBLIC_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def allowed_asset_extensions(self) -> frozenset[str]:
        return frozenset(
            ext.strip().lower().lstrip(".")
            for ext in self.ALLOWED_ASSET_EXTENSIONS.split(",")
            if ext.strip()
        )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings. Call at startup to validate config."""
    return Settings()
