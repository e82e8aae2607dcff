"""Application configuration settings."""

import secrets
from typing import List, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with validation and defaults."""

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./smart_checkin.db",
        description="Async database connection URL"
    )

    # Security Configuration
    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        description="Secret key for signing check-in tokens"
    )
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    checkin_token_expire_minutes: int = Field(
        default=10, description="Lifetime of the token issued after biometric authentication"
    )
    require_checkin_token: bool = Field(
        default=False,
        description="Require the biometric check-in token when submitting the secret code"
    )

    # WebAuthn Configuration
    rp_id: str = Field(default="localhost", description="Relying Party ID")
    rp_name: str = Field(default="Smart Check-in", description="Relying Party Name")
    origin: str = Field(
        default="http://localhost:3000", description="Expected WebAuthn origin"
    )
    challenge_expire_minutes: int = Field(
        default=5, description="Lifetime of a WebAuthn ceremony challenge"
    )

    # Reservation Configuration
    secret_code_max_attempts: int = Field(
        default=5, description="Attempts to generate a unique secret code before giving up"
    )

    # Environment Configuration
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    # Admin and housekeeping access
    admin_username: str = Field(default="admin", description="Admin basic-auth username")
    admin_password: str = Field(
        default="change-this-password", description="Admin basic-auth password"
    )
    cron_secret: Optional[str] = Field(
        default=None, description="Bearer secret required by the cleanup endpoint"
    )

    # Background tasks
    enable_background_tasks: bool = Field(
        default=True, description="Run the periodic challenge sweep in-process"
    )
    challenge_sweep_interval_seconds: int = Field(
        default=300, description="Interval between expired challenge sweeps"
    )

    # CORS Configuration
    allowed_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed CORS origins"
    )
    allowed_methods: List[str] = Field(
        default=["GET", "POST", "PATCH"],
        description="Allowed HTTP methods"
    )
    allowed_headers: List[str] = Field(
        default=["*"], description="Allowed headers"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["development", "staging", "production", "test"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("origin")
    def validate_origin(cls, v: str) -> str:
        """Validate origin URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Origin must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("admin_password")
    def validate_admin_password(cls, v: str, info: ValidationInfo) -> str:
        if v == "change-this-password" and info.data.get("environment") == "production":
            raise ValueError("Admin password must be changed in production")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
