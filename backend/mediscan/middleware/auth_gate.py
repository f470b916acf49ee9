"""
MediScan API: Authentication Gate Middleware
=============================================

What:  Allows or challenges each request based on its path classification.
How:   1. Classify the path with mediscan.access.classify()
       2. TEST, DOCTOR_AUTH and PUBLIC paths pass without an identity check
       3. PROTECTED (and, by default, UNCLASSIFIED) paths need a caller
          identity; without one the request ends here with 401 and no
          route handler runs
       The resolved identity is stored on ``request.state.identity`` so
       handlers never resolve it a second time.
When:  After request ID and logging middleware, before routing.

CORS preflight (OPTIONS) requests carry no credentials and always pass.
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from mediscan.access import RouteClass, classify, requires_identity
from mediscan.config import settings
from mediscan.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class AuthGateMiddleware(BaseHTTPMiddleware):
    """
    Route-level access control.

    Args:
        deny_unclassified: Challenge paths that match no access list.
            When None, ``settings.deny_unclassified_routes`` is read per request.
    """

    def __init__(self, app, deny_unclassified: Optional[bool] = None, **kwargs):
        super().__init__(app, **kwargs)
        self.deny_unclassified = deny_unclassified

    def _deny_unclassified(self) -> bool:
        if self.deny_unclassified is not None:
            return self.deny_unclassified
        return settings.deny_unclassified_routes

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        route_class = classify(path)
        request.state.route_class = route_class

        if not requires_identity(route_class, self._deny_unclassified()):
            return await call_next(request)

        identity = await request.app.state.identity_provider.resolve(request)
        request.state.identity = identity

        if not identity:
            rid = request_id_var.get("")
            if route_class is RouteClass.UNCLASSIFIED:
                logger.warning(
                    "[%s] Unclassified path %s denied without identity", rid, path
                )
            else:
                logger.info("[%s] Authentication required for %s", rid, path)
            return JSONResponse(
                status_code=401,
                content={
                    "success": False,
                    "error": "Unauthorized",
                    "request_id": rid,
                },
            )

        return await call_next(request)
