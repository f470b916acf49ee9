"""
MediScan API: Request ID Middleware
====================================

What:  Assigns a correlation ID to each incoming request and echoes it back.
How:   Uses the client's X-Request-ID if present, otherwise a short UUID.
       The ID is stored in a ContextVar (for loggers and exception handlers)
       and on ``request.state`` (for route handlers).
When:  Outermost middleware after CORS; runs before the auth gate so that
       401 responses carry an ID too.

Unexpected exceptions escaping the routes are rendered here as the 500 error
envelope while the ID is still set, so the body, the X-Request-ID header and
the CORS headers all survive.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Coroutine-local: each concurrent request sees its own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again or contact support."


def error_body(message: str, details: Optional[str] = None) -> dict:
    """The error envelope: ``{success, error, details?, request_id}``."""
    body = {"success": False, "error": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return body


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a unique ID to each request for tracing."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 characters are enough to correlate log lines
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                rid,
                request.method,
                request.url.path,
                str(e),
                exc_info=True,
            )
            response = JSONResponse(status_code=500, content=error_body(UNEXPECTED_ERROR_MESSAGE))
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
