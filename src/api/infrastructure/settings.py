"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Only used when the storage backend is ``postgres``.

    Environment variables:
        OG_DB_HOST: Database host (default: localhost)
        OG_DB_PORT: Database port (default: 5432)
        OG_DB_DATABASE: Database name (default: organic_groups)
        OG_DB_USERNAME: Database user (default: organic_groups)
        OG_DB_PASSWORD: Database password (required in production)
        OG_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        OG_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        OG_DB_CREATE_SCHEMA: Create missing tables at startup (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="OG_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="organic_groups", description="Database name")
    username: str = Field(default="organic_groups", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    create_schema: bool = Field(
        default=True,
        description="Create missing tables at startup",
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class MembershipSettings(BaseSettings):
    """Membership store settings.

    Environment variables:
        OG_MEMBERSHIP_DEFAULT_ROLES: Roles every new group type gets
            (JSON list, default: ["administrator", "moderator"])
        OG_MEMBERSHIP_GROUP_TYPES: Group types registered at startup as
            "entity_type:bundle" strings (JSON list, default: [])
    """

    model_config = SettingsConfigDict(
        env_prefix="OG_MEMBERSHIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_roles: list[str] = Field(
        default_factory=lambda: ["administrator", "moderator"],
        description="Roles every new group type gets",
    )
    group_types: list[str] = Field(
        default_factory=list,
        description="Group types registered at startup (entity_type:bundle)",
    )

    @field_validator("group_types")
    @classmethod
    def validate_group_types(cls, value: list[str]) -> list[str]:
        """Each group type must look like ``entity_type:bundle``."""
        for group_type in value:
            entity_type, _, bundle = group_type.partition(":")
            if not entity_type or not bundle:
                raise ValueError(
                    f"Group type '{group_type}' must be formatted as entity_type:bundle"
                )
        return value

    def parsed_group_types(self) -> list[tuple[str, str]]:
        """Return the configured group types as (entity_type, bundle) pairs."""
        pairs = []
        for group_type in self.group_types:
            entity_type, _, bundle = group_type.partition(":")
            pairs.append((entity_type, bundle))
        return pairs


class ReclamationSettings(BaseSettings):
    """Orphan reclamation settings.

    Environment variables:
        OG_RECLAMATION_STRATEGY: simple, batch or cron (default: simple)
        OG_RECLAMATION_QUEUE_NAME: Orphan queue name
        OG_RECLAMATION_BATCH_SIZE: Candidates per batch chunk (default: 10)
        OG_RECLAMATION_CRON_ITEM_LIMIT: Candidates per cron run (default: 100)
        OG_RECLAMATION_CRON_TIME_LIMIT_SECONDS: Time budget per cron run (default: 30)
        OG_RECLAMATION_CRON_INTERVAL_SECONDS: Seconds between cron runs (default: 60)
        OG_RECLAMATION_MAX_RETRIES: Failed attempts before dead-lettering (default: 5)
        OG_RECLAMATION_QUEUE_LEASE_SECONDS: Claim lease for the database queue (default: 300)
    """

    model_config = SettingsConfigDict(
        env_prefix="OG_RECLAMATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    strategy: Literal["simple", "batch", "cron"] = Field(
        default="simple",
        description="Orphan deletion strategy",
    )
    queue_name: str = Field(
        default="og_orphaned_group_content",
        description="Name of the orphan candidate queue",
        min_length=1,
    )
    batch_size: int = Field(
        default=10,
        description="Candidates processed per batch chunk",
        ge=1,
        le=1000,
    )
    cron_item_limit: int = Field(
        default=100,
        description="Maximum candidates processed per cron run",
        ge=1,
    )
    cron_time_limit_seconds: float = Field(
        default=30.0,
        description="Time budget per cron run",
        gt=0,
    )
    cron_interval_seconds: float = Field(
        default=60.0,
        description="Seconds between cron runs",
        gt=0,
    )
    max_retries: int = Field(
        default=5,
        description="Failed attempts before a candidate is dead-lettered",
        ge=1,
    )
    queue_lease_seconds: int = Field(
        default=300,
        description="Seconds before an unacknowledged claim may be reclaimed",
        ge=1,
    )

    @model_validator(mode="after")
    def validate_cron_budget(self) -> "ReclamationSettings":
        """A cron run must finish before the next one is due."""
        if self.cron_time_limit_seconds > self.cron_interval_seconds:
            raise ValueError(
                f"cron_time_limit_seconds ({self.cron_time_limit_seconds}) must be <= "
                f"cron_interval_seconds ({self.cron_interval_seconds})"
            )
        return self


class ContentServiceSettings(BaseSettings):
    """Settings for the external content service.

    Environment variables:
        OG_CONTENT_BASE_URL: Base URL of the content service; unset keeps
            content in process memory (development only)
        OG_CONTENT_TIMEOUT_SECONDS: Request timeout (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="OG_CONTENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str | None = Field(
        default=None,
        description="Base URL of the content service",
    )
    timeout_seconds: float = Field(
        default=10.0,
        description="Request timeout",
        gt=0,
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="OG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Organic Groups API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum log level",
    )
    storage_backend: Literal["memory", "postgres"] = Field(
        default="memory",
        description="Where memberships, the content index and the queue live",
    )

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def membership(self) -> MembershipSettings:
        """Get membership settings."""
        return get_membership_settings()

    @property
    def reclamation(self) -> ReclamationSettings:
        """Get reclamation settings."""
        return get_reclamation_settings()

    @property
    def content_service(self) -> ContentServiceSettings:
        """Get content service settings."""
        return get_content_service_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings."""
    return DatabaseSettings()


@lru_cache
def get_membership_settings() -> MembershipSettings:
    """Get cached membership settings."""
    return MembershipSettings()


@lru_cache
def get_reclamation_settings() -> ReclamationSettings:
    """Get cached reclamation settings."""
    return ReclamationSettings()


@lru_cache
def get_content_service_settings() -> ContentServiceSettings:
    """Get cached content service settings."""
    return ContentServiceSettings()
