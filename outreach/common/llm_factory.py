"""
LLM factory for capability providers.

All providers talk to OpenAI-compatible chat completion endpoints
(Perplexity for research, Groq for verification and composition), so a
single ChatOpenAI construction path covers them with a per-provider base
URL, key, model and timeout.

Usage:
    from outreach.common.llm_factory import ProviderConfig, create_llm

    llm = create_llm(ProviderConfig.research())
"""

import logging
from dataclasses import dataclass
from typing import Optional

from langchain_openai import ChatOpenAI

from outreach.common.config import Config
from outreach.common.errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderConfig:
    """Connection settings for one OpenAI-compatible provider."""

    name: str
    model: str
    api_key: str
    base_url: str
    temperature: float = 0.2
    timeout_seconds: float = 25.0

    @classmethod
    def research(cls) -> "ProviderConfig":
        return cls(
            name="perplexity",
            model=Config.RESEARCH_MODEL,
            api_key=Config.PPLX_API_KEY,
            base_url=Config.PPLX_BASE_URL,
            temperature=Config.RESEARCH_TEMPERATURE,
            timeout_seconds=Config.PROVIDER_TIMEOUT_SECONDS,
        )

    @classmethod
    def verify(cls) -> "ProviderConfig":
        return cls(
            name="groq-verify",
            model=Config.VERIFY_MODEL,
            api_key=Config.GROQ_API_KEY,
            base_url=Config.GROQ_BASE_URL,
            temperature=Config.VERIFY_TEMPERATURE,
            timeout_seconds=Config.PROVIDER_TIMEOUT_SECONDS,
        )

    @classmethod
    def compose(cls) -> "ProviderConfig":
        return cls(
            name="groq-compose",
            model=Config.COMPOSE_MODEL,
            api_key=Config.GROQ_API_KEY,
            base_url=Config.GROQ_BASE_URL,
            temperature=Config.COMPOSE_TEMPERATURE,
            timeout_seconds=Config.PROVIDER_TIMEOUT_SECONDS,
        )


def create_llm(
    config: ProviderConfig,
    temperature: Optional[float] = None,
) -> ChatOpenAI:
    """
    Create a ChatOpenAI client for a provider.

    Retries are disabled: a failed call is a stage failure, and the
    per-call deadline is enforced by the caller.

    Raises:
        ProviderError: If the provider has no API key configured
    """
    if not config.api_key:
        raise ProviderError(config.name, "API key not configured")

    logger.debug(f"Creating LLM client for {config.name} (model={config.model})")
    return ChatOpenAI(
        model=config.model,
        temperature=config.temperature if temperature is None else temperature,
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=config.timeout_seconds,
        max_retries=0,
    )
