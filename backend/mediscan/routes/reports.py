"""
MediScan API: Report Route Handlers
====================================

What:  Read-only views of the caller's analyses.

Route Inventory:
    GET /api/reports/mongo   {success, reports, count, timestamp}
    GET /api/reports/user    {reports, success, count}
    GET /api/user-data       {success, patientData, count}

All three read the same data with a single document-store call. Repeated
calls with unchanged data return identical ``reports`` and ``count``.
"""

import logging

from fastapi import APIRouter, Depends

from mediscan.dependencies import get_document_store, require_identity
from mediscan.exceptions import InternalServiceError
from mediscan.schemas.envelopes import (
    ErrorResponse,
    ReportsResponse,
    UserDataResponse,
    UserReportsResponse,
)
from mediscan.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reports"])

ERROR_RESPONSES = {
    401: {"description": "Not signed in", "model": ErrorResponse},
    500: {"description": "Document store failure", "model": ErrorResponse},
}


async def _fetch_analyses(store: DocumentStore, user_id: str, failure_message: str):
    try:
        analyses = await store.get_user_analyses(user_id)
    except Exception as e:
        logger.error("Error fetching analyses for user %s: %s", user_id, e)
        raise InternalServiceError.wrap(failure_message, e) from e

    logger.info("Found %d analyses for user %s", len(analyses), user_id)
    return analyses


@router.get(
    "/reports/mongo",
    response_model=ReportsResponse,
    responses=ERROR_RESPONSES,
    summary="All analysis reports of the signed-in user",
)
async def get_reports(
    user_id: str = Depends(require_identity),
    store: DocumentStore = Depends(get_document_store),
) -> ReportsResponse:
    analyses = await _fetch_analyses(store, user_id, "Failed to fetch reports")
    return ReportsResponse(reports=analyses, count=len(analyses))


@router.get(
    "/reports/user",
    response_model=UserReportsResponse,
    responses=ERROR_RESPONSES,
    summary="All analysis reports of the signed-in user (compact envelope)",
)
async def get_user_reports(
    user_id: str = Depends(require_identity),
    store: DocumentStore = Depends(get_document_store),
) -> UserReportsResponse:
    reports = await _fetch_analyses(store, user_id, "Internal server error")
    return UserReportsResponse(reports=reports, count=len(reports))


@router.get(
    "/user-data",
    response_model=UserDataResponse,
    responses=ERROR_RESPONSES,
    summary="Patient records of the signed-in user",
)
async def get_user_data(
    user_id: str = Depends(require_identity),
    store: DocumentStore = Depends(get_document_store),
) -> UserDataResponse:
    analyses = await _fetch_analyses(store, user_id, "Failed to fetch user data")
    return UserDataResponse(patient_data=analyses, count=len(analyses))
