"""
Pipeline Run API Route.

POST /api/run streams the research -> verify -> compose pipeline as NDJSON.
Once streaming starts the response is always 200; failures arrive as the
terminal error line.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from outreach.pipeline.orchestrator import PipelineRun
from outreach.pipeline.streaming import NDJSON_MEDIA_TYPE, STREAM_HEADERS, ProgressStreamEncoder
from outreach.pipeline.types import PipelineRequest

from ..auth import get_user_id, verify_token
from ..dependencies import ServiceContainer, get_container
from ..models import RunRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["pipeline"])

MISSING_FIELDS_ERROR = "company, role, and highlights are required"


def to_pipeline_request(body: RunRequest) -> PipelineRequest:
    return PipelineRequest(
        company=body.company,
        role=body.role,
        highlights=body.highlights,
        domain=body.domain,
        tone=body.tone,
        resume_context=body.resume_content if body.use_resume else None,
    )


@router.post("/run", dependencies=[Depends(verify_token)])
async def run_pipeline(
    body: RunRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    container: ServiceContainer = Depends(get_container),
):
    """Run the pipeline and stream lifecycle events as NDJSON."""
    if body.missing_required():
        return JSONResponse(status_code=400, content={"error": MISSING_FIELDS_ERROR})

    pipeline_request = to_pipeline_request(body)
    run = PipelineRun(request=pipeline_request, user_id=user_id)
    logger.info(f"[{run.run_id}] Run requested for {pipeline_request.company} by {user_id}")

    encoder = ProgressStreamEncoder(
        container.orchestrator.run(pipeline_request, user_id, run=run),
        is_disconnected=request.is_disconnected,
        run_id=run.run_id,
    )
    return StreamingResponse(
        encoder.stream(),
        media_type=NDJSON_MEDIA_TYPE,
        headers=STREAM_HEADERS,
    )
