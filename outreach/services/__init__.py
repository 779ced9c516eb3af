"""
Services for on-demand outreach operations.

Regeneration and rephrase extend OperationService for consistent run ids,
timing and result shapes; HistoryService serves history and contact
result listings.
"""

from outreach.services.history_service import HistoryService
from outreach.services.operation_base import OperationResult, OperationService, OperationTimer
from outreach.services.regeneration_service import RegenerationService, RephraseService
from outreach.services.source_validator import SourceValidator, ValidatedSource

__all__ = [
    # Base classes
    "OperationResult",
    "OperationService",
    "OperationTimer",
    # Services
    "HistoryService",
    "RegenerationService",
    "RephraseService",
    "SourceValidator",
    "ValidatedSource",
]
