"""
Configuration loader for the outreach pipeline.

Loads all settings from environment variables (.env file).
Validates required settings and provides type-safe access.
"""

import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


class Config:
    """
    Centralized configuration for all pipeline components.

    All values loaded from environment variables - NO SECRETS IN CODE.
    """

    # ===== MongoDB =====
    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    MONGO_DB_NAME: str = os.getenv("MONGO_DB_NAME", "outreach")

    # ===== Research provider (Perplexity, OpenAI-compatible) =====
    PPLX_API_KEY: str = os.getenv("PPLX_API_KEY", "")
    PPLX_BASE_URL: str = os.getenv("PPLX_BASE_URL", "https://api.perplexity.ai")
    RESEARCH_MODEL: str = os.getenv("RESEARCH_MODEL", "sonar-pro")

    # ===== Verify / Compose provider (Groq, OpenAI-compatible) =====
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
    GROQ_BASE_URL: str = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
    VERIFY_MODEL: str = os.getenv("VERIFY_MODEL", "llama-3.3-70b-versatile")
    COMPOSE_MODEL: str = os.getenv("COMPOSE_MODEL", "llama-3.3-70b-versatile")

    # ===== LLM Temperatures =====
    RESEARCH_TEMPERATURE: float = _float_env("RESEARCH_TEMPERATURE", 0.2)
    VERIFY_TEMPERATURE: float = _float_env("VERIFY_TEMPERATURE", 0.1)
    COMPOSE_TEMPERATURE: float = _float_env("COMPOSE_TEMPERATURE", 0.7)

    # ===== Pipeline Behavior =====
    # Per-call deadline for each capability provider
    PROVIDER_TIMEOUT_SECONDS: float = _float_env("PROVIDER_TIMEOUT_SECONDS", 25.0)
    # Research+Verify results younger than this are reused (7 days)
    RUN_CACHE_MAX_AGE_HOURS: int = _int_env("RUN_CACHE_MAX_AGE_HOURS", 168)
    # LinkedIn fallback truncation when compose output is not JSON
    LINKEDIN_FALLBACK_CHARS: int = _int_env("LINKEDIN_FALLBACK_CHARS", 300)

    # ===== Logging =====
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "simple")

    @classmethod
    def validate(cls) -> List[str]:
        """
        Check that provider credentials are present.

        Returns:
            List of missing setting names (empty when fully configured)
        """
        missing = []
        if not cls.PPLX_API_KEY:
            missing.append("PPLX_API_KEY")
        if not cls.GROQ_API_KEY:
            missing.append("GROQ_API_KEY")
        return missing

    @classmethod
    def summary(cls) -> str:
        """Get configuration summary (redacts secrets)."""
        return (
            f"Config(db={cls.MONGO_DB_NAME}, research_model={cls.RESEARCH_MODEL}, "
            f"verify_model={cls.VERIFY_MODEL}, compose_model={cls.COMPOSE_MODEL}, "
            f"timeout={cls.PROVIDER_TIMEOUT_SECONDS}s, "
            f"cache_max_age={cls.RUN_CACHE_MAX_AGE_HOURS}h, "
            f"pplx_key={'set' if cls.PPLX_API_KEY else 'missing'}, "
            f"groq_key={'set' if cls.GROQ_API_KEY else 'missing'})"
        )
