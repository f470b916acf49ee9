"""
MediScan API: Health Query Route
=================================

What:  POST /api/health-query, answers a patient's health question with AI.
How:   Validates the question, makes one HealthAssistant call, returns the
       answer in the success envelope.

Validation (400 on failure):
    - ``query`` present, a string, and not blank after stripping
    - at most 1000 characters (measured before stripping)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from mediscan.dependencies import get_health_assistant, require_identity
from mediscan.exceptions import InternalServiceError, ValidationError
from mediscan.schemas.envelopes import ErrorResponse, HealthQueryRequest, HealthQueryResponse
from mediscan.services.llm_base import HealthAssistant
from mediscan.utils.formatting import truncate_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health Query"])

MAX_QUERY_LENGTH = 1000
LOG_PREVIEW_LENGTH = 100


def validate_health_query(query: Optional[str]) -> str:
    """Return the query unchanged, or raise ValidationError."""
    if not isinstance(query, str) or not query.strip():
        raise ValidationError(message="Health query is required", field="query")
    if len(query) > MAX_QUERY_LENGTH:
        raise ValidationError(
            message=f"Query too long. Please limit to {MAX_QUERY_LENGTH} characters.",
            field="query",
            context={"length": len(query), "max_length": MAX_QUERY_LENGTH},
        )
    return query


@router.post(
    "/health-query",
    response_model=HealthQueryResponse,
    responses={
        400: {"description": "Missing, blank or oversized query", "model": ErrorResponse},
        401: {"description": "Not signed in", "model": ErrorResponse},
        500: {"description": "AI service failure", "model": ErrorResponse},
    },
    summary="Ask the AI health assistant a question",
)
async def submit_health_query(
    body: HealthQueryRequest,
    user_id: str = Depends(require_identity),
    assistant: HealthAssistant = Depends(get_health_assistant),
) -> HealthQueryResponse:
    query = validate_health_query(body.query)

    logger.info("Processing health query for user: %s", user_id)
    logger.info("Query: %s", truncate_text(query, LOG_PREVIEW_LENGTH))

    try:
        answer = await assistant.analyze_health_query(query, user_id)
    except Exception as e:
        logger.error("Error processing health query for user %s: %s", user_id, e)
        raise InternalServiceError.wrap("Failed to process health query", e) from e

    logger.info("Health query answered for user %s (%d chars)", user_id, len(answer))
    return HealthQueryResponse(query=query, response=answer)
