"""
MediScan API: Request Dependencies
===================================

What:  FastAPI dependencies that hand collaborators and the caller identity
       to route handlers.
How:   Service handles live on ``app.state`` (set by create_app/lifespan);
       the caller identity lives on ``request.state`` (set by the auth gate).
Who:   Used via ``Depends(...)`` in every route module.
"""

import logging
from typing import Optional

from fastapi import Request

from mediscan.exceptions import UnauthorizedError
from mediscan.services.document_store import DocumentStore
from mediscan.services.llm_base import HealthAssistant

logger = logging.getLogger(__name__)

# Sentinel distinguishing "gate has not resolved yet" from "resolved to None"
_UNRESOLVED = object()


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_health_assistant(request: Request) -> HealthAssistant:
    return request.app.state.health_assistant


async def resolve_identity(request: Request) -> Optional[str]:
    """
    Return the caller identity for this request, resolving it at most once.

    The auth gate normally resolves it first; routes the gate does not cover
    fall back to the same provider here.
    """
    identity = getattr(request.state, "identity", _UNRESOLVED)
    if identity is _UNRESOLVED:
        identity = await request.app.state.identity_provider.resolve(request)
        request.state.identity = identity
    return identity


async def require_identity(request: Request) -> str:
    """Dependency for handlers that need a signed-in user. 401 otherwise."""
    identity = await resolve_identity(request)
    if not identity:
        logger.info("Rejected %s %s: no caller identity", request.method, request.url.path)
        raise UnauthorizedError()
    return identity
