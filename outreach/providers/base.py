"""
Base class for capability providers.

A provider wraps one OpenAI-compatible chat model. Each call runs under
its own deadline; timeouts and transport failures surface as
ProviderError, unparseable answers as ProviderFormatError.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from outreach.common.errors import ProviderError, ProviderFormatError
from outreach.common.json_utils import parse_llm_json
from outreach.common.llm_factory import ProviderConfig, create_llm

logger = logging.getLogger(__name__)


class CapabilityProvider:
    """Shared request/response handling for research, verify and compose providers."""

    def __init__(
        self,
        config: ProviderConfig,
        llm: Optional[BaseChatModel] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """
        Args:
            config: Provider connection settings
            llm: Pre-built chat model (tests inject fakes here). Built lazily
                 from config when omitted.
            timeout_seconds: Per-call deadline, defaults to config.timeout_seconds
        """
        self.config = config
        self._llm = llm
        self.timeout_seconds = config.timeout_seconds if timeout_seconds is None else timeout_seconds

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = create_llm(self.config)
        return self._llm

    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Run one chat completion under the provider deadline.

        Raises:
            ProviderError: On timeout, transport failure or empty content
        """
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=user_prompt),
        ]
        try:
            response = await asyncio.wait_for(self.llm.ainvoke(messages), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise ProviderError(self.name, f"timed out after {self.timeout_seconds}s") from e
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(self.name, f"request failed: {e}") from e

        content = _content_text(response.content)
        if not content.strip():
            raise ProviderError(self.name, "empty response")
        logger.debug(f"[{self.name}] Received {len(content)} chars")
        return content

    def _parse_json(self, content: str) -> Dict[str, Any]:
        try:
            return parse_llm_json(content)
        except ValueError as e:
            raise ProviderFormatError(self.name, str(e), raw_content=content) from e


def _content_text(content: Any) -> str:
    # Some chat models return a list of content blocks
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content or "")
