"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Freelance Identity API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)
    public_base_url: str = Field(
        default="http://localhost:3001",
        description="Externally reachable base URL used to build asset references",
    )
    frontend_url: str = Field(default="http://localhost:3000")

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/freelance",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # Session credentials
    jwt_secret_key: str = Field(
        ...,
        description="Secret key for signing session credentials (required)",
    )
    jwt_algorithm: str = Field(default="HS256")
    session_lifetime_minutes: int = Field(
        default=7 * 24 * 60,
        gt=0,
        description="Lifetime of an issued session credential",
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("JWT_SECRET_KEY must not be blank")
        return v

    # Identity providers
    google_client_id: str = Field(default="")
    google_client_secret: str = Field(default="")
    github_client_id: str = Field(default="")
    github_client_secret: str = Field(default="")
    provider_timeout_seconds: float = Field(default=10.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def google_enabled(self) -> bool:
        """Google login needs both client credentials."""
        return bool(self.google_client_id and self.google_client_secret)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def github_enabled(self) -> bool:
        """GitHub login needs both client credentials."""
        return bool(self.github_client_id and self.github_client_secret)

    # Avatar uploads
    max_upload_bytes: int = Field(
        default=5 * 1024 * 1024,
        description="Upload size ceiling for avatar images",
    )
    storage_root: str = Field(
        default="./uploads",
        description="Directory that holds uploaded assets (served at /uploads)",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme.

        Render and other providers supply a standard ``postgresql://`` URL.
        SQLAlchemy's async engine requires ``postgresql+asyncpg://``.
        """
        url = self.database_url
        for scheme in ("postgresql://", "postgres://"):
            if url.startswith(scheme):
                return url.replace(scheme, "postgresql+asyncpg://", 1)
        return url

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises pydantic's ValidationError when JWT_SECRET_KEY is absent, which
    aborts startup.
    """
    return Settings()  # type: ignore[call-arg]


settings = get_settings()
