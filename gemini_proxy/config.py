"""Configuration management for the application."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Loguru log level")

    # Credentials
    gemini_api_key: str | None = Field(
        default=None, description="Upstream Gemini API key"
    )
    proxy_secret_key: str | None = Field(
        default=None, description="Shared secret expected in the Authorization header"
    )

    # Upstream Configuration
    default_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used when the request does not name one",
    )

    # Attachment Fetch Configuration
    proxy: str | None = Field(default=None, description="HTTP proxy URL")
    timeout: int = Field(default=120, description="Attachment fetch timeout in seconds")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the process-wide settings."""
    return settings
