"""
MediScan API: Analytics Route
==============================

What:  GET /api/analytics/mongo, the caller's scan statistics.
How:   One document-store call; the summary is returned verbatim.
"""

import logging

from fastapi import APIRouter, Depends

from mediscan.dependencies import get_document_store, require_identity
from mediscan.exceptions import InternalServiceError
from mediscan.schemas.envelopes import AnalyticsResponse, ErrorResponse
from mediscan.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analytics"])


@router.get(
    "/analytics/mongo",
    response_model=AnalyticsResponse,
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        500: {"description": "Document store failure", "model": ErrorResponse},
    },
    summary="Scan analytics for the signed-in user",
)
async def get_analytics(
    user_id: str = Depends(require_identity),
    store: DocumentStore = Depends(get_document_store),
) -> AnalyticsResponse:
    """
    Returns total scans, anomalies, normal scans, average confidence, a
    per-image-type breakdown and the five most recent analyses.
    """
    logger.info("Generating analytics for user: %s", user_id)

    try:
        analytics = await store.get_user_analytics(user_id)
    except Exception as e:
        logger.error("Error generating analytics for user %s: %s", user_id, e)
        raise InternalServiceError.wrap("Failed to generate analytics", e) from e

    logger.info(
        "Analytics generated: totalScans=%s anomaliesDetected=%s normalScans=%s",
        analytics.get("totalScans"),
        analytics.get("anomaliesDetected"),
        analytics.get("normalScans"),
    )
    return AnalyticsResponse(analytics=analytics)
