"""
Edge proxy configuration using Pydantic Settings.

Provides centralized configuration for:
- Service identity and bind address
- Upstream data provider (URL, timeouts, user agent)
- Festival registry location
- CORS policy (allow-list, preview suffixes, preflight caching)
- Logging and metrics

All settings support environment variable overrides and .env file loading.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional
from functools import lru_cache


DEFAULT_UPSTREAM_URL = "https://data.cambridgebeerfestival.com"


class Settings(BaseSettings):
    """
    Proxy settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    prefix "FESTIVAL_PROXY_" (e.g., FESTIVAL_PROXY_UPSTREAM_URL).

    Environment variables are loaded from:
    1. System environment
    2. .env file in the current directory
    3. Default values defined below
    """

    # =========================================================================
    # Service Settings
    # =========================================================================

    app_name: str = Field(
        default="Festival Data Proxy",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Service version"
    )
    environment: str = Field(
        default="production",
        description="Environment: development|staging|production"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode - enables uvicorn reload"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Bind host"
    )
    port: int = Field(
        default=8787,
        description="Bind port",
        gt=0,
        lt=65536
    )

    # =========================================================================
    # Upstream Settings
    # =========================================================================

    upstream_url: str = Field(
        default=DEFAULT_UPSTREAM_URL,
        description="Origin of the festival data provider (no trailing slash)"
    )
    upstream_user_agent: str = Field(
        default="Cambridge-Beer-Festival-App-Proxy/1.0",
        description="User-Agent sent on every upstream request"
    )
    upstream_timeout: float = Field(
        default=30.0,
        description="Total upstream request timeout (seconds)",
        gt=0
    )
    upstream_connect_timeout: float = Field(
        default=10.0,
        description="Upstream connection timeout (seconds)",
        gt=0
    )
    upstream_follow_redirects: bool = Field(
        default=True,
        description="Follow upstream redirects instead of relaying them"
    )

    # =========================================================================
    # Festival Registry
    # =========================================================================

    registry_path: Optional[str] = Field(
        default=None,
        description="Path to festivals.json (defaults to the packaged registry)"
    )

    # =========================================================================
    # CORS Settings
    # =========================================================================

    cors_origins: List[str] = Field(
        default=[
            "https://richardthe3rd.github.io",
            "https://cambeerfestival.app",
            "https://staging.cambeerfestival.app",
            "https://tunnel.cambeerfestival.app",
            "http://localhost:8080",
            "http://localhost:3000",
            "http://127.0.0.1:8080",
        ],
        description="Origins allowed by exact match"
    )
    cors_origin_suffixes: List[str] = Field(
        default=[".cambeerfestival.pages.dev"],
        description="Hostname suffixes allowed for preview deployments"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Send Access-Control-Allow-Credentials for allowed origins"
    )
    cors_allow_methods: List[str] = Field(
        default=["GET", "OPTIONS"],
        description="Methods advertised in preflight responses"
    )
    cors_allow_headers: List[str] = Field(
        default=["Content-Type"],
        description="Request headers advertised in preflight responses"
    )
    cors_max_age: int = Field(
        default=86400,
        description="Preflight cache duration (seconds)",
        ge=0
    )
    cors_development_max_age: Optional[int] = Field(
        default=None,
        description="Preflight cache duration for loopback and preview origins",
        ge=0
    )

    # =========================================================================
    # Response Settings
    # =========================================================================

    normalize_json_charset: bool = Field(
        default=False,
        description="Append charset=utf-8 to relayed application/json responses"
    )

    # =========================================================================
    # Monitoring and Logging
    # =========================================================================

    metrics_enabled: bool = Field(
        default=True,
        description="Enable Prometheus metrics"
    )
    metrics_path: str = Field(
        default="/_proxy/metrics",
        description="Metrics endpoint path"
    )

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got: {v}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        allowed = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("upstream_url")
    @classmethod
    def validate_upstream_url(cls, v: str) -> str:
        """Require an absolute http(s) origin and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"upstream_url must be an http(s) URL, got: {v}")
        return v.rstrip("/")

    @field_validator("cors_origin_suffixes")
    @classmethod
    def validate_cors_origin_suffixes(cls, v: List[str]) -> List[str]:
        """Suffixes must start with a dot so they only match whole labels."""
        for suffix in v:
            if not suffix.startswith("."):
                raise ValueError(f"cors origin suffix must start with '.', got: {suffix}")
        return [suffix.lower() for suffix in v]

    @field_validator("metrics_path")
    @classmethod
    def validate_metrics_path(cls, v: str) -> str:
        """Metrics path must be absolute."""
        if not v.startswith("/"):
            raise ValueError(f"metrics_path must start with '/', got: {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    # =========================================================================
    # Model Config
    # =========================================================================

    model_config = SettingsConfigDict(
        env_prefix="FESTIVAL_PROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded from:
    1. Environment variables with FESTIVAL_PROXY_ prefix
    2. .env file in the current directory
    3. Default values

    Returns:
        Settings: Cached settings instance
    """
    return Settings()


def clear_settings_cache():
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
