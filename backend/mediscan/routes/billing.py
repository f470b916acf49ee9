"""
MediScan API: Billing Routes (placeholders)
============================================

GET /api/payments/history and GET /api/subscription/status answer with fixed
data until a payment provider is integrated. Both still require a signed-in
user.
"""

import logging

from fastapi import APIRouter, Depends

from mediscan.dependencies import require_identity
from mediscan.schemas.envelopes import (
    ErrorResponse,
    PaymentHistoryResponse,
    SubscriptionStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Billing"])


@router.get(
    "/payments/history",
    response_model=PaymentHistoryResponse,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="Payment history (always empty)",
)
async def get_payment_history(user_id: str = Depends(require_identity)) -> PaymentHistoryResponse:
    logger.debug("Payment history requested by %s", user_id)
    return PaymentHistoryResponse(payments=[])


@router.get(
    "/subscription/status",
    response_model=SubscriptionStatusResponse,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="Subscription status (always inactive)",
)
async def get_subscription_status(
    user_id: str = Depends(require_identity),
) -> SubscriptionStatusResponse:
    logger.debug("Subscription status requested by %s", user_id)
    return SubscriptionStatusResponse(plan=None, status="inactive", next_billing_date=None)
