"""Compose provider: personalized email and LinkedIn messages."""

import logging
from typing import Optional

from langchain_core.language_models.chat_models import BaseChatModel

from outreach.common.config import Config
from outreach.common.errors import ProviderFormatError
from outreach.common.llm_factory import ProviderConfig
from outreach.pipeline.tones import DEFAULT_TONE, WritingTone
from outreach.pipeline.types import ComposedMessages, Contact, VerifiedDoc
from outreach.providers.base import CapabilityProvider
from outreach.providers.prompts import (
    REPHRASE_SYSTEM_PROMPT,
    build_compose_prompt,
    build_compose_system_prompt,
)

logger = logging.getLogger(__name__)


class ComposeProvider(CapabilityProvider):
    """Groq-backed message composition."""

    def __init__(self, config: Optional[ProviderConfig] = None, llm: Optional[BaseChatModel] = None, **kwargs):
        super().__init__(config or ProviderConfig.compose(), llm=llm, **kwargs)

    async def compose(
        self,
        verified: VerifiedDoc,
        company: str,
        role: str,
        highlights: str,
        tone: WritingTone = DEFAULT_TONE,
        contact: Optional[Contact] = None,
        resume_context: Optional[str] = None,
    ) -> ComposedMessages:
        """
        Write an email and a LinkedIn message from verified research.

        When the model does not return JSON, the raw text is used as the
        email and its first characters as the LinkedIn message.

        Raises:
            ProviderError: On timeout or transport failure
        """
        content = await self._complete(
            build_compose_system_prompt(tone),
            build_compose_prompt(
                company=company,
                role=role,
                highlights=highlights,
                verified=verified,
                contact_name=contact.name if contact else None,
                resume_context=resume_context,
            ),
        )
        try:
            raw = self._parse_json(content)
        except ProviderFormatError:
            logger.warning(f"[{self.name}] Compose output was not JSON, using raw text")
            return ComposedMessages(
                email=content.strip(),
                linkedin=content.strip()[: Config.LINKEDIN_FALLBACK_CHARS],
            )

        return ComposedMessages(
            email=str(raw.get("email") or "").strip(),
            linkedin=str(raw.get("linkedin") or "").strip(),
        )

    async def rephrase_linkedin(self, linkedin: str) -> str:
        """Rewrite a LinkedIn message to 22 words."""
        content = await self._complete(REPHRASE_SYSTEM_PROMPT, linkedin)
        return content.strip()
