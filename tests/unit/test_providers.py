"""
Unit tests for outreach/providers

Each provider is driven with a fake chat model so no network call is made.
Covers JSON parsing, the degraded fallbacks for non-JSON answers, the
per-call deadline and the LLM factory.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from outreach.common.errors import ProviderError
from outreach.common.llm_factory import ProviderConfig, create_llm
from outreach.pipeline.tones import WritingTone
from outreach.pipeline.types import Claim, Contact, ResearchDoc, Source, VerifiedDoc
from outreach.providers.compose import ComposeProvider
from outreach.providers.research import ResearchProvider
from outreach.providers.verify import VerifyProvider
from tests.helpers.fakes import fake_chat_model


def _config(name="test-provider", api_key="test-key"):
    return ProviderConfig(name=name, model="test-model", api_key=api_key, base_url="https://llm.test/v1")


STRUCTURED_RESEARCH = json.dumps(
    {
        "company_overview": "Acme builds logistics software.",
        "key_business_points": {
            "recent_funding": {"description": "Raised $40M Series B", "source_url": "https://techcrunch.com/acme"},
            "growth_signals": {"description": "Not available", "source_url": ""},
        },
        "contact_information": {
            "primary_contact": {"name": "N/A", "title": "N/A"},
            "secondary_contact": {
                "name": "Jane Doe",
                "title": "VP Engineering",
                "email": "jane.doe@acme.com",
                "inferred": True,
                "contact_type": "leadership",
            },
        },
    }
)


# ===== Research =====

class TestResearchProvider:
    """Tests for ResearchProvider.research."""

    @pytest.mark.asyncio
    async def test_parses_structured_response(self):
        provider = ResearchProvider(_config(), llm=fake_chat_model(STRUCTURED_RESEARCH))
        doc = await provider.research("Acme", "CTO")

        assert doc.summary == "Acme builds logistics software."
        assert [p.claim for p in doc.points] == ["Raised $40M Series B"]
        assert doc.points[0].source.title == "Recent funding"
        assert doc.contact.secondary_contact.name == "Jane Doe"
        assert doc.sources[0].url == "https://techcrunch.com/acme"

    @pytest.mark.asyncio
    async def test_sends_system_and_user_messages(self):
        llm = fake_chat_model('{"summary": "Acme"}')
        provider = ResearchProvider(_config(), llm=llm)
        await provider.research("Acme", "CTO", domain="acme.com")

        messages = llm.ainvoke.call_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert "Acme (acme.com)" in messages[1].content
        assert "CTO" in messages[1].content

    @pytest.mark.asyncio
    async def test_fenced_json(self):
        provider = ResearchProvider(_config(), llm=fake_chat_model('```json\n{"summary": "Acme"}\n```'))
        doc = await provider.research("Acme", "CTO")
        assert doc.summary == "Acme"

    @pytest.mark.asyncio
    async def test_non_json_becomes_summary(self):
        """Should keep unparseable research as the summary instead of failing."""
        provider = ResearchProvider(_config(), llm=fake_chat_model("Acme is a logistics company."))
        doc = await provider.research("Acme", "CTO")
        assert doc.summary == "Acme is a logistics company."
        assert doc.points == []

    @pytest.mark.asyncio
    async def test_transport_error_raises_provider_error(self):
        provider = ResearchProvider(_config(), llm=fake_chat_model(ConnectionError("reset")))
        with pytest.raises(ProviderError, match="request failed"):
            await provider.research("Acme", "CTO")

    @pytest.mark.asyncio
    async def test_empty_response_raises(self):
        provider = ResearchProvider(_config(), llm=fake_chat_model("   "))
        with pytest.raises(ProviderError, match="empty response"):
            await provider.research("Acme", "CTO")

    @pytest.mark.asyncio
    async def test_timeout_raises_provider_error(self):
        """Should abort a call that exceeds the provider deadline."""

        async def slow(*args, **kwargs):
            await asyncio.sleep(5)
            return AIMessage(content="{}")

        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=slow)
        provider = ResearchProvider(_config(), llm=llm, timeout_seconds=0.01)

        with pytest.raises(ProviderError, match="timed out"):
            await provider.research("Acme", "CTO")

    @pytest.mark.asyncio
    async def test_list_content_blocks(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(
            return_value=AIMessage(content=[{"type": "text", "text": '{"summary": '}, {"type": "text", "text": '"Acme"}'}])
        )
        doc = await ResearchProvider(_config(), llm=llm).research("Acme", "CTO")
        assert doc.summary == "Acme"


# ===== Verify =====

class TestVerifyProvider:
    """Tests for VerifyProvider.verify."""

    @pytest.mark.asyncio
    async def test_drops_unsourced_claims(self):
        response = json.dumps(
            {
                "summary": "Acme is a logistics company.",
                "points": [
                    {"claim": "Raised $40M", "source": {"title": "TechCrunch", "url": "https://techcrunch.com/acme"}},
                    {"claim": "Hiring aggressively"},
                    "Rumored acquisition",
                ],
            }
        )
        provider = VerifyProvider(_config(), llm=fake_chat_model(response))
        verified = await provider.verify(ResearchDoc(summary="Acme"))

        assert isinstance(verified, VerifiedDoc)
        assert [p.claim for p in verified.points] == ["Raised $40M"]

    @pytest.mark.asyncio
    async def test_prompt_contains_research(self):
        llm = fake_chat_model('{"summary": "ok"}')
        research = ResearchDoc(summary="Acme builds logistics software", points=[Claim(claim="Series B")])
        await VerifyProvider(_config(), llm=llm).verify(research)
        assert "Acme builds logistics software" in llm.ainvoke.call_args.args[0][1].content

    @pytest.mark.asyncio
    async def test_non_json_becomes_summary_only_doc(self):
        provider = VerifyProvider(_config(), llm=fake_chat_model("I could not verify these claims."))
        verified = await provider.verify(ResearchDoc(summary="Acme"))
        assert verified.summary == "I could not verify these claims."
        assert verified.points == []
        assert verified.contact is None

    @pytest.mark.asyncio
    async def test_keeps_contact(self):
        response = json.dumps(
            {"summary": "Acme", "points": [], "contact": {"name": "Pat Kim", "title": "CTO", "email": "pat@acme.com"}}
        )
        verified = await VerifyProvider(_config(), llm=fake_chat_model(response)).verify(ResearchDoc())
        assert verified.contact.legacy.name == "Pat Kim"

    @pytest.mark.asyncio
    async def test_timeout(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=asyncio.TimeoutError())
        with pytest.raises(ProviderError, match="timed out"):
            await VerifyProvider(_config(), llm=llm).verify(ResearchDoc())


# ===== Compose =====

class TestComposeProvider:
    """Tests for ComposeProvider.compose and rephrase_linkedin."""

    @pytest.fixture
    def verified(self):
        return VerifiedDoc(
            summary="Acme raised a Series B.",
            points=[Claim(claim="Raised $40M", source=Source(url="https://techcrunch.com/acme"))],
        )

    @pytest.mark.asyncio
    async def test_parses_messages(self, verified):
        response = json.dumps({"email": "Subject: Hello Acme\n\nHi Jane,", "linkedin": "Hi Jane, congrats on the raise."})
        provider = ComposeProvider(_config(), llm=fake_chat_model(response))

        messages = await provider.compose(verified, company="Acme", role="CTO", highlights="Scaled platform")

        assert messages.email.startswith("Subject:")
        assert messages.subject_line("Acme") == "Hello Acme"
        assert messages.linkedin == "Hi Jane, congrats on the raise."

    @pytest.mark.asyncio
    async def test_prompt_includes_tone_contact_and_resume(self, verified):
        llm = fake_chat_model('{"email": "Subject: x", "linkedin": "y"}')
        provider = ComposeProvider(_config(), llm=llm)

        await provider.compose(
            verified,
            company="Acme",
            role="CTO",
            highlights="Scaled platform",
            tone=WritingTone.CASUAL,
            contact=Contact(name="Jane Doe"),
            resume_context="R" * 5000,
        )

        system, user = llm.ainvoke.call_args.args[0]
        assert WritingTone.CASUAL.style_instruction in system.content
        assert "Contact: Jane Doe" in user.content
        assert "Raised $40M" in user.content
        assert "R" * 4000 in user.content
        assert "R" * 4001 not in user.content

    @pytest.mark.asyncio
    async def test_no_resume_block_without_resume(self, verified):
        llm = fake_chat_model('{"email": "Subject: x", "linkedin": "y"}')
        await ComposeProvider(_config(), llm=llm).compose(verified, company="Acme", role="CTO", highlights="h")
        assert "Candidate resume" not in llm.ainvoke.call_args.args[0][1].content

    @pytest.mark.asyncio
    async def test_non_json_fallback(self, verified):
        """Should use the raw text as email and its first 300 chars as LinkedIn."""
        raw = "Subject: Hello\n\n" + "word " * 200
        provider = ComposeProvider(_config(), llm=fake_chat_model(raw))

        messages = await provider.compose(verified, company="Acme", role="CTO", highlights="h")

        assert messages.email == raw.strip()
        assert messages.linkedin == raw.strip()[:300]

    @pytest.mark.asyncio
    async def test_compose_error_raises(self, verified):
        provider = ComposeProvider(_config(), llm=fake_chat_model(RuntimeError("rate limited")))
        with pytest.raises(ProviderError):
            await provider.compose(verified, company="Acme", role="CTO", highlights="h")

    @pytest.mark.asyncio
    async def test_rephrase_linkedin(self):
        llm = fake_chat_model("  Congrats on the Series B, Acme team; I scaled a platform to 10M users and would love to connect.  ")
        rephrased = await ComposeProvider(_config(), llm=llm).rephrase_linkedin("Long original message")
        assert rephrased.startswith("Congrats")
        assert llm.ainvoke.call_args.args[0][1].content == "Long original message"


# ===== LLM factory =====

class TestCreateLlm:
    def test_missing_key_raises(self):
        """Should refuse to build a client without an API key."""
        with pytest.raises(ProviderError, match="API key not configured"):
            create_llm(_config(api_key=""))

    def test_builds_client_without_retries(self):
        llm = create_llm(_config())
        assert llm.max_retries == 0
        assert llm.model_name == "test-model"

    def test_lazy_llm_reports_missing_key_on_call(self):
        provider = ResearchProvider(_config(api_key=""))
        with pytest.raises(ProviderError):
            provider.llm

    def test_default_configs(self):
        assert ProviderConfig.research().name == "perplexity"
        assert ProviderConfig.verify().name == "groq-verify"
        assert ProviderConfig.compose().name == "groq-compose"
