"""
MediScan API: Diagnostics Route
================================

What:  GET /api/test-mongo, exercises the document store end to end.
Who:   Operators checking a deployment; no sign-in required (TEST route).

The response reports whether MONGODB_URI is set. Its value is never echoed.
"""

import logging

from fastapi import APIRouter, Depends

from mediscan.config import settings
from mediscan.dependencies import get_document_store
from mediscan.exceptions import InternalServiceError
from mediscan.schemas.envelopes import ErrorResponse, MongoTestResponse
from mediscan.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Diagnostics"])


@router.get(
    "/test-mongo",
    response_model=MongoTestResponse,
    responses={500: {"description": "Connection test crashed", "model": ErrorResponse}},
    summary="Test the MongoDB connection",
)
async def check_mongo_connection(store: DocumentStore = Depends(get_document_store)) -> MongoTestResponse:
    logger.info("Testing MongoDB connection and operations")

    try:
        result = await store.test_connection()
    except Exception as e:
        logger.error("Database test failed: %s", e)
        raise InternalServiceError.wrap("Database test failed", e) from e

    return MongoTestResponse(
        success=bool(result.get("success")),
        message=str(result.get("message", "")),
        mongo_uri="Configured" if settings.mongodb_configured else "Not configured",
    )
