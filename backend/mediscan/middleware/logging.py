"""
MediScan API: Request Logging Middleware
=========================================

What:  One structured log line per HTTP request.
How:   Measures duration around the downstream call and logs method, path,
       status, duration, request ID, the access class set by the auth gate,
       whether a caller identity was present and the client IP. Level
       follows the status code.

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, request ID, access class, identity present
    ❌ Don't log: request bodies, health questions, tokens, cookies
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from mediscan.middleware.request_id import request_id_var

logger = logging.getLogger("mediscan.access")

# Liveness probes run every few seconds
QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    Level by status:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")
        authenticated = bool(getattr(request.state, "identity", None))
        route_class = getattr(request.state, "route_class", None)
        access = route_class.value if route_class is not None else "-"

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] %s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            access,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "authenticated": authenticated,
                "route_class": access,
            },
        )

        return response
