"""
Capability providers for the outreach pipeline.

Each provider wraps an OpenAI-compatible chat model and returns the
pipeline's canonical types.
"""

from outreach.providers.base import CapabilityProvider
from outreach.providers.compose import ComposeProvider
from outreach.providers.normalize import normalize_research, normalize_verified
from outreach.providers.research import ResearchProvider
from outreach.providers.verify import VerifyProvider

__all__ = [
    "CapabilityProvider",
    "ComposeProvider",
    "ResearchProvider",
    "VerifyProvider",
    "normalize_research",
    "normalize_verified",
]
