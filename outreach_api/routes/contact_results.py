"""
Contact Results API Route.

GET /api/contact-results - The caller's research records, newest first.
"""

import asyncio
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from ..auth import get_user_id, verify_token
from ..dependencies import ServiceContainer, get_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["contact-results"])


@router.get("/contact-results", dependencies=[Depends(verify_token)])
async def list_contact_results(
    user_id: str = Depends(get_user_id),
    container: ServiceContainer = Depends(get_container),
) -> List[Dict[str, Any]]:
    try:
        return await asyncio.to_thread(container.history.list_contact_results, user_id)
    except Exception as e:
        logger.error(f"Failed to list contact results for {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load contact results")
