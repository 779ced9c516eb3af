"""
Research -> verify -> compose pipeline.

Core types live in outreach.pipeline.types; the orchestrator in
outreach.pipeline.orchestrator.
"""

from outreach.pipeline.tones import WritingTone
from outreach.pipeline.types import (
    Claim,
    ComposedMessages,
    Contact,
    ContactInfo,
    PipelineRequest,
    ResearchDoc,
    Source,
    VerifiedDoc,
)

__all__ = [
    "Claim",
    "ComposedMessages",
    "Contact",
    "ContactInfo",
    "PipelineRequest",
    "ResearchDoc",
    "Source",
    "VerifiedDoc",
    "WritingTone",
]
