"""
MediScan API: Doctor Leaderboard Route
=======================================

What:  GET /api/leaderboard/doctors, doctors ranked by rating (PUBLIC route).
How:   One document-store call. Recent review comments are truncated to 100
       characters and patient emails masked before leaving the service.

Query parameters:
    specialization  filter, ``all`` (default) for every specialization
    limit           number of doctors, 1-100 (default 10)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from mediscan.dependencies import get_document_store
from mediscan.exceptions import InternalServiceError
from mediscan.schemas.envelopes import ErrorResponse, LeaderboardData, LeaderboardResponse
from mediscan.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Leaderboard"])


@router.get(
    "/leaderboard/doctors",
    response_model=LeaderboardResponse,
    responses={500: {"description": "Document store failure", "model": ErrorResponse}},
    summary="Doctor leaderboard",
)
async def get_doctor_leaderboard(
    specialization: Optional[str] = Query(default=None),
    limit: int = Query(default=10, ge=1, le=100),
    store: DocumentStore = Depends(get_document_store),
) -> LeaderboardResponse:
    try:
        data = await store.get_doctor_leaderboard(specialization=specialization, limit=limit)
    except Exception as e:
        logger.error("Error fetching doctor leaderboard: %s", e)
        raise InternalServiceError.wrap("Internal server error", e) from e

    logger.info(
        "Leaderboard served: %d doctors, filter=%s",
        len(data.get("leaderboard", [])),
        data.get("currentFilter"),
    )
    return LeaderboardResponse(data=LeaderboardData(**data))
