"""
Exception taxonomy for the outreach pipeline.

Stage errors are fatal to a run and carry the tag reported in the
terminal stream event. Persistence errors never abort a run; they are
recorded through the error sink in error_handling.py.
"""

from typing import Optional


class ProviderError(Exception):
    """Transport, timeout or configuration failure of a capability provider."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ProviderFormatError(ProviderError):
    """Provider answered, but the answer could not be parsed as structured output."""

    def __init__(self, provider: str, message: str, raw_content: str = ""):
        self.raw_content = raw_content
        super().__init__(provider, message)


class PipelineStageError(Exception):
    """Base class for fatal stage failures."""

    tag = "PipelineFailed"
    stage = "pipeline"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"message": str(self), "tag": self.tag, "stage": self.stage}


class ResearchFailed(PipelineStageError):
    tag = "ResearchFailed"
    stage = "research"


class VerificationFailed(PipelineStageError):
    tag = "VerificationFailed"
    stage = "verify"


class MessagingFailed(PipelineStageError):
    tag = "MessagingFailed"
    stage = "messaging"


class PersistenceError(Exception):
    """Result store read/write failure. Never fatal to a pipeline run."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation}: {message}")
