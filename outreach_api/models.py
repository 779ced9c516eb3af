"""
Shared Pydantic models for the outreach API.

Request bodies accept the camelCase field names sent by the dashboard.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from outreach.services.source_validator import ValidatedSource


class RunRequest(BaseModel):
    """Request body for a streamed pipeline run."""

    model_config = ConfigDict(populate_by_name=True)

    company: Optional[str] = Field(None, description="Target company name")
    role: Optional[str] = Field(None, description="Role the candidate is applying for")
    highlights: Optional[str] = Field(None, description="Candidate highlights to weave into messages")
    domain: Optional[str] = Field(None, description="Company website domain, helps disambiguation")
    tone: Optional[str] = Field(None, description="Writing tone; unknown values fall back to formal")
    resume_content: Optional[str] = Field(None, alias="resumeContent", description="Extracted resume text")
    use_resume: bool = Field(
        False,
        alias="useResumeInPersonalization",
        description="Pass resume text to the compose stage",
    )

    def missing_required(self) -> bool:
        return not all(
            value and value.strip() for value in (self.company, self.role, self.highlights)
        )


class MessagingRequest(RunRequest):
    """Request body for compose-only regeneration."""


class MessagingResponse(BaseModel):
    email: Optional[str] = None
    linkedin: Optional[str] = None


class RephraseRequest(BaseModel):
    linkedin: str = Field(..., min_length=1, description="LinkedIn message to shorten")


class RephraseResponse(BaseModel):
    linkedin: str


class ValidateUrlsRequest(BaseModel):
    urls: List[str] = Field(..., max_length=50, description="Source URLs to check")


class ValidationSummary(BaseModel):
    total: int
    valid: int
    invalid: int


class ValidateUrlsResponse(BaseModel):
    results: List[ValidatedSource]
    summary: ValidationSummary


class DeleteResponse(BaseModel):
    success: bool
    id: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str
    timestamp: datetime
