"""Research provider: company brief and contacts from a web-grounded model."""

import logging
from typing import Optional

from langchain_core.language_models.chat_models import BaseChatModel

from outreach.common.errors import ProviderFormatError
from outreach.common.llm_factory import ProviderConfig
from outreach.pipeline.types import ResearchDoc
from outreach.providers.base import CapabilityProvider
from outreach.providers.normalize import normalize_research
from outreach.providers.prompts import RESEARCH_SYSTEM_PROMPT, build_research_prompt

logger = logging.getLogger(__name__)


class ResearchProvider(CapabilityProvider):
    """Perplexity-backed company research."""

    def __init__(self, config: Optional[ProviderConfig] = None, llm: Optional[BaseChatModel] = None, **kwargs):
        super().__init__(config or ProviderConfig.research(), llm=llm, **kwargs)

    async def research(self, company: str, role: str, domain: Optional[str] = None) -> ResearchDoc:
        """
        Research a company for a role.

        Unparseable output is kept as the summary of an otherwise empty
        document rather than failing the stage.

        Raises:
            ProviderError: On timeout or transport failure
        """
        content = await self._complete(RESEARCH_SYSTEM_PROMPT, build_research_prompt(company, role, domain))
        try:
            raw = self._parse_json(content)
        except ProviderFormatError:
            logger.warning(f"[{self.name}] Research output was not JSON, keeping raw text as summary")
            return normalize_research(content)
        return normalize_research(raw)
