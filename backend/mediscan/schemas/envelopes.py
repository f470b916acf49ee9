"""
MediScan API: Pydantic Request/Response Schemas
================================================

What:  Pydantic models defining the JSON envelopes of every endpoint.
How:   FastAPI validates request bodies against these models, serializes
       responses through them (by alias, so the wire keeps the camelCase names
       the frontend expects) and generates the OpenAPI document from them.

Envelope shape:
    success → {"success": true, ...data fields, "timestamp": "...Z"}
    error   → {"success": false, "error": "...", "details": "...", "request_id": "..."}
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def utc_now_iso() -> str:
    """ISO 8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class HealthQueryRequest(BaseModel):
    """
    Body of POST /api/health-query.

    ``query`` is optional at the schema level so that a missing field gets the
    same 400 message as a blank one (see routes/health_query.py).
    """
    query: Optional[str] = Field(default=None, description="Health question (1-1000 characters)")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AnalyticsResponse(BaseModel):
    success: bool = True
    analytics: Dict[str, Any] = Field(description="Analytics summary from the document store")
    timestamp: str = Field(default_factory=utc_now_iso)


class HealthQueryResponse(BaseModel):
    success: bool = True
    query: str = Field(description="The question as submitted")
    response: str = Field(description="AI-generated answer")
    timestamp: str = Field(default_factory=utc_now_iso)


class ReportsResponse(BaseModel):
    """GET /api/reports/mongo: analyses newest first."""
    success: bool = True
    reports: List[Dict[str, Any]]
    count: int
    timestamp: str = Field(default_factory=utc_now_iso)


class UserReportsResponse(BaseModel):
    """GET /api/reports/user: same data, no timestamp."""
    reports: List[Dict[str, Any]]
    success: bool = True
    count: int


class UserDataResponse(BaseModel):
    success: bool = True
    patient_data: List[Dict[str, Any]] = Field(alias="patientData")
    count: int

    model_config = {"populate_by_name": True}


class PaymentHistoryResponse(BaseModel):
    """Placeholder until billing is wired to a payment provider."""
    payments: List[Dict[str, Any]] = Field(default_factory=list)


class SubscriptionStatusResponse(BaseModel):
    """Placeholder: every account reports an inactive subscription."""
    plan: Optional[str] = None
    status: str = "inactive"
    next_billing_date: Optional[str] = Field(default=None, alias="nextBillingDate")

    model_config = {"populate_by_name": True}


class MongoTestResponse(BaseModel):
    success: bool
    message: str
    timestamp: str = Field(default_factory=utc_now_iso)
    mongo_uri: str = Field(
        alias="mongoUri",
        description="'Configured' or 'Not configured'; the URI itself is never returned",
    )

    model_config = {"populate_by_name": True}


class LeaderboardData(BaseModel):
    leaderboard: List[Dict[str, Any]]
    specializations: List[str]
    current_filter: str = Field(alias="currentFilter")

    model_config = {"populate_by_name": True}


class LeaderboardResponse(BaseModel):
    success: bool = True
    data: LeaderboardData


class ErrorResponse(BaseModel):
    """
    Error envelope for every non-2xx response.

    Fields:
        error:      Human-readable message
        details:    Underlying failure message, when there is one
        request_id: Correlation ID for tracing this error in server logs
    """
    success: bool = False
    error: str
    details: Optional[str] = None
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Service and dependency status for GET /health."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str
    database: str = Field(description="Document store: connected, disconnected")
    ai_service: str = Field(description="Health assistant: available, unavailable")
    uptime_seconds: float
