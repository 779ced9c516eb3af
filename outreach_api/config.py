"""
Outreach API Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from outreach.common.config import Config

logger = logging.getLogger(__name__)


class RunnerSettings(BaseSettings):
    """
    Outreach service configuration with validation.

    All settings can be overridden via environment variables
    (case-insensitive, no prefix: RUNNER_API_SECRET -> runner_api_secret).
    """

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False, extra="ignore")

    # === Pipeline ===
    provider_timeout_seconds: float = Field(
        default=25.0,
        gt=0,
        le=300,
        description="Deadline for each capability provider call in seconds"
    )
    run_cache_max_age_hours: int = Field(
        default=168,
        ge=1,
        le=24 * 90,
        description="Reuse research/verify results younger than this (hours)"
    )
    source_check_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="Deadline for each source URL HEAD or GET request in seconds"
    )

    # === Security ===
    runner_api_secret: Optional[str] = Field(
        default=None,
        min_length=16,
        description="API authentication secret (min 16 chars for security)"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )

    # === CORS ===
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins"
    )

    # === MongoDB ===
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    mongo_db_name: str = Field(
        default="outreach",
        description="MongoDB database name"
    )
    mongo_server_selection_timeout_ms: int = Field(
        default=5000,
        ge=100,
        le=60000,
        description="MongoDB server selection timeout"
    )

    # === Server ===
    host: str = Field(default="0.0.0.0", description="Bind address for the API server")
    port: int = Field(default=8000, ge=1, le=65535, description="Port for the API server")

    # === Logging ===
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="simple", description="simple or json")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("runner_api_secret")
    @classmethod
    def validate_secret_strength(cls, v: Optional[str]) -> Optional[str]:
        """Reject obviously weak secrets."""
        if v is None:
            return None
        weak_secrets = {"secret", "password", "changeme"}
        if v.lower() in weak_secrets or len(set(v)) < 4:
            raise ValueError("API secret is too weak - use a secure random string")
        return v

    @field_validator("mongodb_uri")
    @classmethod
    def validate_mongodb_uri(cls, v: str) -> str:
        if not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(f"Invalid MongoDB URI: {v}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in {"simple", "json"}:
            raise ValueError("log_format must be 'simple' or 'json'")
        return v_lower

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def auth_required(self) -> bool:
        """Auth required in production OR if a secret is configured."""
        return self.is_production or self.runner_api_secret is not None

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning/error messages.
        """
        issues = []

        if self.is_production:
            if not self.runner_api_secret:
                issues.append("CRITICAL: RUNNER_API_SECRET required in production")
            if not self.cors_origins:
                issues.append("WARNING: CORS_ORIGINS not configured")
            if "localhost" in self.mongodb_uri:
                issues.append("WARNING: Using localhost MongoDB in production")

        return issues


@lru_cache()
def get_settings() -> RunnerSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached. Tests call get_settings.cache_clear()
    after changing the environment.
    """
    return RunnerSettings()


def validate_config_on_startup() -> RunnerSettings:
    """
    Validate configuration at application startup.

    Raises ValueError with details if config is invalid.
    Logs warnings for non-critical issues.
    """
    try:
        settings = get_settings()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    for issue in settings.validate_production_config():
        if issue.startswith("CRITICAL"):
            raise ValueError(issue)
        logger.warning(issue)

    missing = Config.validate()
    if missing:
        logger.warning(f"Provider credentials missing: {', '.join(missing)} (runs will fail at that stage)")

    # Redact secrets
    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  provider_timeout={settings.provider_timeout_seconds}s")
    logger.info(f"  run_cache_max_age={settings.run_cache_max_age_hours}h")
    logger.info(f"  mongodb_uri={'*****' if 'localhost' not in settings.mongodb_uri else settings.mongodb_uri}")
    logger.info(f"  auth_required={settings.auth_required}")
    logger.info(f"  {Config.summary()}")
    return settings
