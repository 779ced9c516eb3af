"""
Messaging API Routes.

- POST /api/messaging - Regenerate email and LinkedIn messages (compose only)
- POST /api/rephrase - Shorten a LinkedIn message
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..auth import get_user_id, verify_token
from ..dependencies import ServiceContainer, get_container
from ..models import MessagingRequest, MessagingResponse, RephraseRequest, RephraseResponse
from .run import MISSING_FIELDS_ERROR, to_pipeline_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["messaging"])


@router.post("/messaging", response_model=MessagingResponse, dependencies=[Depends(verify_token)])
async def regenerate_messages(
    body: MessagingRequest,
    user_id: str = Depends(get_user_id),
    container: ServiceContainer = Depends(get_container),
):
    """Regenerate messages from persisted research without re-running research or verify."""
    if body.missing_required():
        return JSONResponse(status_code=400, content={"error": MISSING_FIELDS_ERROR})

    result = await container.regeneration.execute(to_pipeline_request(body), user_id)
    if not result.success:
        return JSONResponse(status_code=502, content={"error": result.error or "Message generation failed"})

    for warning in result.warnings:
        logger.warning(f"[{result.run_id}] {warning}")
    return MessagingResponse(email=result.data.get("email"), linkedin=result.data.get("linkedin"))


@router.post("/rephrase", response_model=RephraseResponse, dependencies=[Depends(verify_token)])
async def rephrase_linkedin(
    body: RephraseRequest,
    user_id: str = Depends(get_user_id),
    container: ServiceContainer = Depends(get_container),
):
    result = await container.rephrase.execute(body.linkedin)
    if not result.success:
        return JSONResponse(status_code=502, content={"error": result.error or "Rephrase failed"})
    return RephraseResponse(linkedin=result.data["linkedin"])
