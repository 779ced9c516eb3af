"""
Source URL API Route.

POST /api/validate-urls - Check which cited source URLs still resolve.
"""

import logging

from fastapi import APIRouter, Depends

from ..auth import verify_token
from ..dependencies import ServiceContainer, get_container
from ..models import ValidateUrlsRequest, ValidateUrlsResponse, ValidationSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sources"])


@router.post("/validate-urls", response_model=ValidateUrlsResponse, dependencies=[Depends(verify_token)])
async def validate_urls(
    body: ValidateUrlsRequest,
    container: ServiceContainer = Depends(get_container),
):
    """Check each URL with HEAD, then GET; unreachable URLs are reported, not raised."""
    results = await container.sources.validate_urls(body.urls)
    valid = sum(1 for result in results if result.is_valid)
    return ValidateUrlsResponse(
        results=results,
        summary=ValidationSummary(total=len(results), valid=valid, invalid=len(results) - valid),
    )
