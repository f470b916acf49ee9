"""
MediScan API: Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the three error classes clients see.
How:   Each exception carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the error envelope with the matching HTTP status code.
Who:   Raised by route handlers and services; caught by global handlers.

Exception Hierarchy:
    MediScanError (base)
    ├── UnauthorizedError        → 401 Unauthorized
    ├── ValidationError          → 400 Bad Request
    └── InternalServiceError     → 500 Internal Server Error
        ├── DocumentStoreError   → 500 (document store call failed)
        └── LLMServiceError      → 500 (AI health assistant call failed)

No other status codes are produced by this layer.
"""

from typing import Any, Dict, Optional


class MediScanError(Exception):
    """
    Base exception for all MediScan application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class UnauthorizedError(MediScanError):
    """
    Raised when a request carries no usable caller identity.

    When:    Missing/invalid session token on a route that needs a user.
    HTTP:    401 Unauthorized
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(MediScanError):
    """
    Raised when client input fails validation.

    When:    Missing, blank or oversized health query; malformed JSON body.
    HTTP:    400 Bad Request

    Example response:
        {
            "success": false,
            "error": "Query too long. Please limit to 1000 characters.",
            "request_id": "a1b2c3d4"
        }
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)


class InternalServiceError(MediScanError):
    """
    Raised when a collaborator call fails unexpectedly.

    HTTP:    500 Internal Server Error

    Attributes:
        details: Message of the underlying exception, returned to the client
                 in the ``details`` field of the error envelope.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.details = details

    @classmethod
    def wrap(cls, message: str, exc: BaseException) -> "InternalServiceError":
        """Builds an error whose details carry ``exc``'s own message."""
        if isinstance(exc, InternalServiceError) and exc.details:
            details = exc.details
        else:
            details = str(exc) or type(exc).__name__
        return cls(message=message, details=details, context={"cause": type(exc).__name__})


class DocumentStoreError(InternalServiceError):
    """
    Raised when a MongoDB operation fails.

    The raw driver message goes into ``details``; connection strings are
    never part of it since motor does not echo credentials.
    """

    def __init__(
        self,
        message: str = "Document store operation failed",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class LLMServiceError(InternalServiceError):
    """
    Raised when the Gemini health assistant fails.

    No retry happens; the request is answered with a 500 immediately.
    """

    def __init__(
        self,
        message: str = "AI health assistant is unavailable",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)
