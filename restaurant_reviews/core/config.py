"""
Core configuration and settings for the Restaurant Review Service
Environment variables override the defaults below; a local .env file is honoured
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Service information
    service_name: str = Field(default="restaurant-review-service")
    service_version: str = Field(default="1.0.0")
    api_version: str = Field(default="1.0.0")
    environment: str = Field(default="development")

    # Server configuration
    port: int = Field(default=8004)
    host: str = Field(default="0.0.0.0")

    # Document store (reviews)
    mongodb_host: str = Field(default="localhost")
    mongodb_port: int = Field(default=27017)
    mongodb_username: Optional[str] = Field(default=None)
    mongodb_password: Optional[str] = Field(default=None)
    mongodb_database: str = Field(default="reviewdb")
    mongodb_server_selection_timeout_ms: int = Field(default=5000)

    # Relational store (restaurants, users)
    postgres_host: str = Field(default="localhost")
    postgres_port: int = Field(default=5432)
    postgres_user: str = Field(default="postgres")
    postgres_password: str = Field(default="postgres")
    postgres_database: str = Field(default="restaurantdb")
    postgres_pool_size: int = Field(default=5)

    @property
    def mongodb_url(self) -> str:
        """Construct MongoDB connection URL"""
        if self.mongodb_username and self.mongodb_password:
            return (
                f"mongodb://{self.mongodb_username}:{self.mongodb_password}"
                f"@{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}?authSource=admin"
            )
        return f"mongodb://{self.mongodb_host}:{self.mongodb_port}/{self.mongodb_database}"

    @property
    def postgres_url(self) -> str:
        """Construct SQLAlchemy asyncpg connection URL"""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_database}"
        )

    # Logging configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")
    log_to_file: bool = Field(default=False)
    log_to_console: bool = Field(default=True)
    log_file_path: str = Field(default="logs/restaurant-review-service.log")

    # Request tracing
    correlation_id_header: str = Field(default="X-Correlation-ID")
    otel_enabled: bool = Field(default=True)
    otel_excluded_urls: str = Field(default="health")

    # JWT verification (tokens are issued elsewhere)
    jwt_secret: str = Field(default="change-me-in-production-jwt-signing-key")
    jwt_algorithm: str = Field(default="HS256")

    # Pending profile-update notifications
    pending_update_ttl_seconds: int = Field(default=86400)


# Global config instance
config = Config()
