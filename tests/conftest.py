"""
Shared fixtures for all tests.

Provides environment isolation (no real provider keys or MongoDB URIs leak
into tests) and canonical sample documents for the Acme / CTO scenario.
"""

import os
from unittest.mock import AsyncMock, MagicMock

# Set test environment BEFORE any imports so Config and RunnerSettings load test values
os.environ["ENVIRONMENT"] = "development"
os.environ["PPLX_API_KEY"] = "pplx-test-mock-key"
os.environ["GROQ_API_KEY"] = "gsk-test-mock-key"
os.environ["MONGODB_URI"] = "mongodb://localhost:27017"

import pytest

from outreach.pipeline.persistence import ResultMerger
from outreach.pipeline.run_cache import RunCache
from outreach.pipeline.types import (
    ComposedMessages,
    Contact,
    ContactInfo,
    PipelineRequest,
    ResearchDoc,
    Source,
    Claim,
    VerifiedDoc,
)
from outreach.providers.compose import ComposeProvider
from outreach.providers.research import ResearchProvider
from outreach.providers.verify import VerifyProvider
from tests.helpers.fakes import FIXED_NOW, InMemoryResultStore


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Use mock credentials so no test can reach a real provider."""
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("PPLX_API_KEY", "pplx-test-mock-key")
    monkeypatch.setenv("GROQ_API_KEY", "gsk-test-mock-key")
    monkeypatch.delenv("RUNNER_API_SECRET", raising=False)


# ===== Sample documents =====


@pytest.fixture
def acme_request():
    return PipelineRequest(
        company="Acme",
        role="CTO",
        highlights="Scaled platform to 10M users; led 40-person engineering org",
    )


@pytest.fixture
def acme_research():
    return ResearchDoc(
        summary="Acme builds logistics software for mid-market retailers.",
        points=[
            Claim(claim="Raised $40M Series B in 2024", source=Source(title="TechCrunch", url="https://techcrunch.com/acme")),
            Claim(claim="Migrating to Kubernetes"),
        ],
        sources=[Source(title="TechCrunch", url="https://techcrunch.com/acme")],
    )


@pytest.fixture
def acme_verified():
    return VerifiedDoc(
        summary="Acme is a logistics software company that recently raised a Series B.",
        points=[
            Claim(claim="Raised $40M Series B in 2024", source=Source(title="TechCrunch", url="https://techcrunch.com/acme")),
        ],
    )


@pytest.fixture
def jane_contact():
    return Contact(
        name="Jane Doe",
        title="VP Engineering",
        email="jane.doe@acme.com",
        inferred=True,
        contact_type="leadership",
        source=Source(title="Acme Team", url="https://acme.com/team"),
    )


@pytest.fixture
def acme_messages():
    return ComposedMessages(
        email="Subject: Scaling Acme's platform\n\nHi there,\n\nI led a 40-person org...",
        linkedin="Impressed by Acme's Series B; I scaled a platform to 10M users and would love to connect.",
    )


# ===== Wiring =====


@pytest.fixture
def store():
    return InMemoryResultStore()


@pytest.fixture
def merger(store):
    return ResultMerger(store, clock=lambda: FIXED_NOW)


@pytest.fixture
def run_cache(store):
    return RunCache(store, max_age_hours=168, clock=lambda: FIXED_NOW)


@pytest.fixture
def research_provider(acme_research):
    provider = MagicMock(spec=ResearchProvider)
    provider.research = AsyncMock(return_value=acme_research)
    return provider


@pytest.fixture
def verify_provider(acme_verified):
    provider = MagicMock(spec=VerifyProvider)
    provider.verify = AsyncMock(return_value=acme_verified)
    return provider


@pytest.fixture
def compose_provider(acme_messages):
    provider = MagicMock(spec=ComposeProvider)
    provider.compose = AsyncMock(return_value=acme_messages)
    provider.rephrase_linkedin = AsyncMock(return_value="Short and friendly note about Acme's platform growth.")
    return provider


@pytest.fixture
def contact_info_with_placeholder_primary():
    return ContactInfo(
        primary_contact=Contact(name="N/A", title="Not available"),
        secondary_contact=Contact(name="Jane Doe", title="VP Engineering", email="jane.doe@acme.com", inferred=True),
    )
