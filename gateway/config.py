"""Configuration management for the search gateway."""

import logging
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Host to bind to")
    port: int = Field(default=3000, description="Listening port (PORT)")

    # Service identity reported by the root and debug endpoints
    service_name: str = Field(default="supabase-mcp", description="Protocol server name")
    service_version: str = Field(default="1.0.0", description="Protocol server version")
    patch: str = Field(default="v6.4", description="Release tag reported by diagnostics")
    protocol_version: str = Field(default="2024-11-05", description="MCP protocol version")

    # Database (configured, never queried)
    supabase_url: Optional[str] = Field(default=None, description="Supabase project URL")
    supabase_service_key: Optional[str] = Field(default=None, description="Supabase service role key")

    # Observability
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (json or text)")
    log_file: Optional[str] = Field(default=None, description="Log file path")

    # Transport
    cors_allow_origins: str = Field(default="*", description="Comma-separated CORS origins")
    sse_endpoint: str = Field(default="/messages", description="Path advertised to SSE clients for posting")
    sse_keepalive_secs: float = Field(default=15.0, description="Idle seconds before an SSE keepalive comment")
    session_timeout_secs: int = Field(default=3600, description="Idle seconds before an SSE session expires")

    @property
    def cors_origins_parsed(self) -> List[str]:
        """Parse CORS origins from string to list."""
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    @property
    def database_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Only json and text renderers exist."""
        value = str(v).lower()
        if value not in ("json", "text"):
            raise ValueError(f"log_format must be 'json' or 'text', got {v!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        value = str(v).upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return value

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        if not 0 < v < 65536:
            raise ValueError(f"Port out of range: {v}")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance, read from the environment on first use
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings.

    Raises:
        ValidationError: if the environment holds an invalid value
    """
    global settings
    if settings is None:
        settings = Settings()
    return settings


def validate_startup_config() -> None:
    """Validate configuration at startup and fail fast if invalid."""
    config = get_settings()

    if not config.cors_origins_parsed:
        raise RuntimeError("CORS origin list cannot be empty")

    if config.sse_keepalive_secs <= 0:
        raise RuntimeError("SSE keepalive interval must be positive")

    if not config.database_configured:
        logger.warning("SUPABASE_URL / SUPABASE_SERVICE_KEY not set; database client is unconfigured")

    logger.info(
        "Configuration validated: %s %s on %s:%s",
        config.service_name,
        config.patch,
        config.host,
        config.port,
    )
