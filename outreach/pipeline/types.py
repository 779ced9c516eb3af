"""
Canonical data model for the research -> verify -> compose pipeline.

Every provider response is normalized into these models before it crosses
a stage boundary, so downstream code never inspects raw provider shapes.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from outreach.pipeline.tones import DEFAULT_TONE, WritingTone

_SUBJECT_RE = re.compile(r"^\s*subject:\s*(.+)$", re.IGNORECASE | re.MULTILINE)


class Source(BaseModel):
    """A citation backing a claim or contact."""
    title: str = Field(default="", description="Human-readable source title")
    url: str = Field(default="", description="Source URL")


class Claim(BaseModel):
    """A single research point, optionally attributed to a source."""
    claim: str = Field(..., description="The factual statement")
    source: Optional[Source] = Field(default=None, description="Where the claim was found")

    @property
    def has_source_url(self) -> bool:
        return bool(self.source and self.source.url.strip())


class Contact(BaseModel):
    """
    A person to reach out to.

    ``inferred`` is True when the email was derived from a naming pattern
    rather than observed in a source. It is never upgraded silently.
    """
    name: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None
    inferred: bool = False
    source: Optional[Source] = None
    contact_type: Optional[str] = None


class ContactInfo(BaseModel):
    """Container for the three contact tiers considered during resolution."""
    primary_contact: Optional[Contact] = None
    secondary_contact: Optional[Contact] = None
    legacy: Optional[Contact] = Field(
        default=None, description="Flat single-contact shape from older research responses"
    )

    def is_empty(self) -> bool:
        return not (self.primary_contact or self.secondary_contact or self.legacy)


class ResearchDoc(BaseModel):
    """Normalized research brief for one company and role."""
    summary: str = ""
    points: List[Claim] = Field(default_factory=list)
    contact: Optional[ContactInfo] = None
    sources: List[Source] = Field(default_factory=list)


class VerifiedDoc(ResearchDoc):
    """
    Research brief after verification.

    Only claims with a non-empty source URL are retained; unsourced
    claims are dropped on construction.
    """

    @field_validator("points")
    @classmethod
    def drop_unsourced_points(cls, v: List[Claim]) -> List[Claim]:
        return [p for p in v if p.has_source_url and p.claim.strip()]


class ComposedMessages(BaseModel):
    """Email and LinkedIn messages produced by the compose stage."""
    email: str = ""
    linkedin: str = ""

    def subject_line(self, company: str) -> str:
        """Extract the email subject, falling back to a generic one."""
        match = _SUBJECT_RE.search(self.email or "")
        if match and match.group(1).strip():
            return match.group(1).strip()
        return f"Outreach to {company}"

    def body(self) -> str:
        """Email text without the Subject line."""
        return _SUBJECT_RE.sub("", self.email or "", count=1).strip()


class PipelineRequest(BaseModel):
    """Immutable input for one pipeline run."""
    model_config = ConfigDict(frozen=True)

    company: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    highlights: str = Field(..., min_length=1)
    domain: Optional[str] = None
    resume_context: Optional[str] = Field(
        default=None, description="Resume text, set only when resume personalization is requested"
    )
    tone: WritingTone = DEFAULT_TONE

    @field_validator("company", "role", "highlights", mode="before")
    @classmethod
    def strip_required(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v

    @field_validator("domain", "resume_context", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("tone", mode="before")
    @classmethod
    def parse_tone(cls, v):
        return WritingTone.parse(v)
