"""Verification provider: keeps only sourced claims and refines contacts."""

import logging
from typing import Optional

from langchain_core.language_models.chat_models import BaseChatModel

from outreach.common.errors import ProviderFormatError
from outreach.common.llm_factory import ProviderConfig
from outreach.pipeline.types import ResearchDoc, VerifiedDoc
from outreach.providers.base import CapabilityProvider
from outreach.providers.normalize import normalize_verified
from outreach.providers.prompts import VERIFY_SYSTEM_PROMPT, build_verify_prompt

logger = logging.getLogger(__name__)


class VerifyProvider(CapabilityProvider):
    """Groq-backed fact verification."""

    def __init__(self, config: Optional[ProviderConfig] = None, llm: Optional[BaseChatModel] = None, **kwargs):
        super().__init__(config or ProviderConfig.verify(), llm=llm, **kwargs)

    async def verify(self, research: ResearchDoc) -> VerifiedDoc:
        """
        Verify a research document.

        Claims without a source URL are dropped. Unparseable output becomes
        a summary-only document with no points and no contact.

        Raises:
            ProviderError: On timeout or transport failure
        """
        content = await self._complete(VERIFY_SYSTEM_PROMPT, build_verify_prompt(research))
        try:
            raw = self._parse_json(content)
        except ProviderFormatError:
            logger.warning(f"[{self.name}] Verification output was not JSON, keeping raw text as summary")
            return VerifiedDoc(summary=content.strip())

        verified = normalize_verified(raw)
        raw_points = raw.get("points")
        if isinstance(raw_points, list) and len(raw_points) > len(verified.points):
            logger.info(f"[{self.name}] Dropped {len(raw_points) - len(verified.points)} unsourced claim(s)")
        return verified
