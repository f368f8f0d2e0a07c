"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from text2sql.config import get_settings

    settings = get_settings()
    print(settings.llm.openrouter_model)
    print(settings.database.url)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """OpenRouter chat-completions configuration."""

    openrouter_api_key: str | None = Field(
        None,
        description="OpenRouter API key (required for SQL generation)",
    )
    openrouter_model: str = Field(
        default="openai/gpt-4o-mini",
        description="Model identifier sent to OpenRouter",
    )
    openrouter_api_url: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        description="Chat-completions endpoint",
    )
    openrouter_site_url: str | None = Field(
        None, description="Optional HTTP-Referer header for OpenRouter rankings"
    )
    openrouter_app_name: str | None = Field(
        None, description="Optional X-Title header for OpenRouter rankings"
    )

    # SQL generation
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Temperature for SQL generation (near-deterministic)",
    )
    max_tokens: int = Field(
        default=256,
        gt=0,
        le=4096,
        description="Output budget for a single SQL statement",
    )
    timeout: int = Field(
        default=30,
        gt=0,
        description="SQL generation request timeout in seconds",
    )

    # Insight generation
    insight_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    insight_max_tokens: int = Field(default=800, gt=0, le=8192)
    insight_timeout: int = Field(
        default=10,
        gt=0,
        description="Insight request timeout in seconds (falls back locally on expiry)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("openrouter_api_key", "openrouter_site_url", "openrouter_app_name", mode="before")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v

    @field_validator("openrouter_api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Only http(s) endpoints are accepted."""
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            raise ValueError("LLM_OPENROUTER_API_URL must be a valid http(s) URL")
        return v


class DatabaseSettings(BaseSettings):
    """Analytics database configuration."""

    url: AnyUrl | None = Field(
        None,
        description="PostgreSQL connection URL for the analytics database",
    )
    pool_size: int = Field(
        default=10,
        gt=0,
        le=50,
        description="Maximum connections in the pool",
    )
    pool_timeout: int = Field(
        default=30,
        gt=0,
        description="Seconds to wait when acquiring a pooled connection",
    )
    statement_timeout: int = Field(
        default=30,
        gt=0,
        description="Per-statement timeout in seconds",
    )
    schema_allowlist: list[str] = Field(
        default_factory=lambda: ["sale"],
        description="Schemas exposed to catalog introspection and the prompt",
    )
    sample_row_limit: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Sample rows fetched per table for the prompt",
    )
    ssl: Literal["auto", "disable", "require"] = Field(
        default="auto",
        description="auto = no TLS for localhost, unverified TLS otherwise",
    )

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("url", mode="before")
    @classmethod
    def normalize_url(cls, v: str | AnyUrl | None) -> str | AnyUrl | None:
        """Treat empty strings as missing."""
        if v == "":
            return None
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: AnyUrl | None) -> AnyUrl | None:
        """Validate supported database URL schemes."""
        if v is None:
            return v
        parsed = urlparse(str(v))
        scheme = parsed.scheme.split("+")[0].lower() if parsed.scheme else ""
        if scheme not in {"postgres", "postgresql"}:
            raise ValueError("DATABASE_URL must use the postgresql scheme.")
        if not parsed.hostname:
            raise ValueError("DATABASE_URL must include a host.")
        return v

    @field_validator("schema_allowlist")
    @classmethod
    def validate_allowlist(cls, v: list[str]) -> list[str]:
        """Schema names are interpolated as quoted identifiers, keep them plain."""
        cleaned = [name.strip() for name in v if name.strip()]
        if not cleaned:
            raise ValueError("DATABASE_SCHEMA_ALLOWLIST must name at least one schema")
        for name in cleaned:
            if '"' in name:
                raise ValueError(f"Invalid schema name: {name!r}")
        return cleaned


class PromptSettings(BaseSettings):
    """Prompt construction settings."""

    default_row_limit: int = Field(
        default=50,
        gt=0,
        le=10000,
        description="Row cap requested in the prompt and enforced by the sanitizer",
    )
    scope_path: str = Field(
        default="config/scope.yaml",
        description="YAML file listing in-scope and out-of-scope topic examples",
    )

    model_config = SettingsConfigDict(
        env_prefix="PROMPT_",
        env_file=".env",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stdout only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,
        )
        # httpx logs every request line at INFO
        logging.getLogger("httpx").setLevel(max(logging.WARNING, getattr(logging, self.level)))


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (llm, database, prompt, logging).

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, staging, production)
        APP_NAME: Application name for logging
        API_HOST: API server host
        API_PORT: API server port
        CORS_ORIGINS: Comma-separated allowed origins ("*" allows all)
        LLM_*: OpenRouter configuration (see LLMSettings)
        DATABASE_*: Analytics database configuration (see DatabaseSettings)
        PROMPT_*: Prompt configuration (see PromptSettings)
        LOG_*: Logging configuration (see LoggingSettings)

    Example:
        >>> settings = get_settings()
        >>> settings.prompt.default_row_limit
        50
        >>> settings.is_production
        False
    """

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(
        default="Text2SQL Analytics",
        description="Application name",
    )
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=4000, gt=0, le=65535, description="API server port")
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    llm: LLMSettings = Field(default_factory=LLMSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    prompt: PromptSettings = Field(default_factory=PromptSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        """Parsed CORS origins."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def model_post_init(self, __context) -> None:
        """Configure logging and record the loaded configuration."""
        self.logging.configure()
        logger = logging.getLogger(__name__)
        logger.info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "environment": self.environment,
                "llm_model": self.llm.openrouter_model,
                "database_pool_size": self.database.pool_size,
                "schema_allowlist": self.database.schema_allowlist,
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("TEXT2SQL_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=False)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
