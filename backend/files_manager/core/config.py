"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every value can be overridden from the environment (case-insensitive)
    or from a ``.env`` file in the working directory.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Document store
    database_url: str = Field(
        default="sqlite:///./files_manager.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(
        default=1800,
        description="Seconds before a connection is recycled"
    )

    # Cache store (sessions)
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL used for session tokens"
    )
    session_ttl_seconds: int = Field(
        default=24 * 60 * 60,
        description="Lifetime of a session token in seconds (not refreshed by use)"
    )

    # Content storage
    # FOLDER_PATH: root directory for uploaded content. Folders become
    # nested subdirectories below it.
    folder_path: str = Field(
        default="/tmp/files_manager",
        description="Root directory for uploaded file content"
    )

    # Post-processing worker
    processor_command: str = Field(
        default="",
        description="Command run by the worker for each image job (empty = worker disabled)"
    )
    worker_poll_interval: int = Field(
        default=10,
        description="Seconds between polls of the processing queue"
    )
    worker_job_timeout: int = Field(
        default=300,
        description="Seconds a single processing command may run before it is killed"
    )

    # Rate Limiting
    rate_limit_per_minute: int = Field(
        default=60,
        description="Maximum requests per user per minute, per client address without a session (0 = unlimited)"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('session_ttl_seconds')
    @classmethod
    def validate_session_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("SESSION_TTL_SECONDS must be positive")
        return v

    def production_findings(self) -> List[str]:
        """Return configuration problems that are unacceptable in production."""
        findings: list[str] = []

        if self.database_url.startswith("sqlite"):
            findings.append(
                "DATABASE_URL points at SQLite. "
                "Use a server database (e.g. PostgreSQL) in production."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            findings.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        return findings

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if any finding is present.
        In development, returns silently; main.py logs the findings.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors = self.production_findings()
        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Global settings instance
settings = Settings()
