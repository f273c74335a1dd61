"""
Configuration management for the random chat service.
Loads settings from environment variables.
"""
from typing import List
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # FastAPI configuration
    API_HOST: str = Field(default="0.0.0.0", description="FastAPI host")
    API_PORT: int = Field(default=3001, description="FastAPI port")
    API_SECRET_KEY: str = Field(default="change-me", description="Shared key for the admin stats endpoints")

    # CORS configuration
    CORS_ORIGINS: str = Field(default="*", description="Comma-separated allowed CORS origins")

    # Database configuration
    POSTGRES_HOST: str = Field(default="localhost", description="PostgreSQL host")
    POSTGRES_PORT: int = Field(default=5432, description="PostgreSQL port")
    POSTGRES_USER: str = Field(default="postgres", description="PostgreSQL username")
    POSTGRES_PASSWORD: str = Field(default="postgres", description="PostgreSQL password")
    POSTGRES_DATABASE: str = Field(default="chat_app", description="PostgreSQL database name")

    # Database connection pool configuration
    DB_POOL_SIZE: int = Field(default=20, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=10, description="Maximum overflow connections for database pool")

    # Redis configuration
    REDIS_HOST: str = Field(default="localhost", description="Redis host")
    REDIS_PORT: int = Field(default=6379, description="Redis port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str = Field(default="", description="Redis password (empty if not set)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum Redis connection pool size")

    # Chat configuration
    MAX_MESSAGE_LENGTH: int = Field(default=2000, description="Maximum characters in a single chat message")
    MAX_INTERESTS: int = Field(default=20, description="Maximum number of interest tags per pairing request")
    TOP_TAGS_LIMIT: int = Field(default=10, description="Number of tags reported in the admin statistics")

    # Rate limiting
    RATE_LIMIT_MESSAGES_PER_MINUTE: int = Field(
        default=30,
        description="Max chat messages per minute per connection (0 disables rate limiting)"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def database_url(self) -> str:
        """Build PostgreSQL connection URL."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"

    @property
    def cors_origins(self) -> List[str]:
        """Parse comma-separated origins to list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
