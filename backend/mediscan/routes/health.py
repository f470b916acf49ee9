"""
MediScan API: Health Check Route
=================================

What:  GET /health for monitoring and load balancer probes (PUBLIC route).
How:   Pings the document store and the AI health assistant.

Status levels:
    - healthy:   document store and AI assistant reachable (HTTP 200)
    - degraded:  AI assistant unavailable; fallback answers still work (HTTP 200)
    - unhealthy: document store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from mediscan import __version__
from mediscan.dependencies import get_document_store, get_health_assistant
from mediscan.schemas.envelopes import HealthResponse
from mediscan.services.document_store import DocumentStore
from mediscan.services.llm_base import HealthAssistant

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Document store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    store: DocumentStore = Depends(get_document_store),
    assistant: HealthAssistant = Depends(get_health_assistant),
):
    db_status = "connected"
    ai_status = "available"
    overall = "healthy"

    if not await store.ping():
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: document store unreachable")

    if not await assistant.health_check():
        ai_status = "unavailable"
        if overall != "unhealthy":
            overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        ai_service=ai_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
