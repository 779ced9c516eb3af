"""
Message History API Routes.

- GET /api/history/emails - Latest email per company for the caller
- GET /api/history/linkedin - Latest LinkedIn message per company for the caller
- DELETE /api/history/emails/{entry_id} - Delete one of the caller's emails
- DELETE /api/history/linkedin/{entry_id} - Delete one of the caller's LinkedIn messages
"""

import asyncio
import logging
from typing import Any, Dict, List, Literal

from fastapi import APIRouter, Depends, HTTPException

from ..auth import get_user_id, verify_token
from ..dependencies import ServiceContainer, get_container
from ..models import DeleteResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/history", tags=["history"], dependencies=[Depends(verify_token)])

HistoryPath = Literal["emails", "linkedin"]
KIND_BY_PATH = {"emails": "email", "linkedin": "linkedin"}


@router.get("/{history_type}")
async def list_history(
    history_type: HistoryPath,
    user_id: str = Depends(get_user_id),
    container: ServiceContainer = Depends(get_container),
) -> List[Dict[str, Any]]:
    try:
        return await asyncio.to_thread(container.history.list_grouped, KIND_BY_PATH[history_type], user_id)
    except Exception as e:
        logger.error(f"Failed to list {history_type} history: {e}")
        raise HTTPException(status_code=500, detail="Failed to load history")


@router.delete("/{history_type}/{entry_id}", response_model=DeleteResponse)
async def delete_history_entry(
    history_type: HistoryPath,
    entry_id: str,
    user_id: str = Depends(get_user_id),
    container: ServiceContainer = Depends(get_container),
):
    try:
        deleted = await asyncio.to_thread(container.history.delete, KIND_BY_PATH[history_type], user_id, entry_id)
    except Exception as e:
        logger.error(f"Failed to delete {history_type} entry {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete history entry")

    if not deleted:
        raise HTTPException(status_code=404, detail="History entry not found")
    return DeleteResponse(success=True, id=entry_id)
