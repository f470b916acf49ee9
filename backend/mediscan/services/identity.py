"""
MediScan API: Caller Identity Resolution
=========================================

What:  Resolves the authenticated principal for an incoming request.
How:   IdentityProvider is the capability interface; the concrete
       SessionTokenIdentityProvider verifies the identity provider's session
       JWT with PyJWT and returns its ``sub`` claim.
Who:   Called once per request by AuthGateMiddleware; route handlers reuse
       the result via ``mediscan.dependencies.require_identity``.

Token sources (first one present wins):
    1. ``Authorization: Bearer <token>`` header
    2. The session cookie (``__session`` by default)

A missing, expired or forged token resolves to ``None``. It never raises:
the decision to reject belongs to the gate and the handlers.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import jwt
from starlette.requests import Request

logger = logging.getLogger(__name__)


class IdentityProvider(ABC):
    """Resolves a request to a caller identity string, or None."""

    @abstractmethod
    async def resolve(self, request: Request) -> Optional[str]:
        ...


def extract_session_token(request: Request, cookie_name: str = "__session") -> Optional[str]:
    """Pull the raw session token from the Authorization header or cookie."""
    raw = (request.headers.get("Authorization") or "").strip()
    if raw:
        parts = raw.split(" ", 1)
        if len(parts) == 2 and parts[0].strip().lower() == "bearer" and parts[1].strip():
            return parts[1].strip()

    cookie = request.cookies.get(cookie_name)
    if cookie and cookie.strip():
        return cookie.strip()
    return None


class SessionTokenIdentityProvider(IdentityProvider):
    """
    Verifies session JWTs issued by the hosted identity provider.

    Args:
        key:         PEM public key (RS256) or shared secret (HS256).
        algorithms:  Accepted signing algorithms.
        issuer:      Expected ``iss`` claim, checked only when set.
        audience:    Expected ``aud`` claim, checked only when set.
        cookie_name: Cookie consulted when no bearer header is present.
    """

    def __init__(
        self,
        key: str,
        algorithms: Sequence[str] = ("RS256",),
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        cookie_name: str = "__session",
    ):
        self.key = key
        self.algorithms = list(algorithms)
        self.issuer = issuer
        self.audience = audience
        self.cookie_name = cookie_name

    async def resolve(self, request: Request) -> Optional[str]:
        token = extract_session_token(request, self.cookie_name)
        if token is None:
            return None
        return self.verify(token)

    def verify(self, token: str) -> Optional[str]:
        """Return the token subject, or None if the token does not verify."""
        if not self.key:
            logger.debug("Session token rejected: no verification key configured")
            return None

        options = {"require": ["exp", "sub"], "verify_aud": self.audience is not None}
        try:
            claims = jwt.decode(
                token,
                self.key,
                algorithms=self.algorithms,
                issuer=self.issuer,
                audience=self.audience,
                options=options,
            )
        except jwt.PyJWTError as e:
            logger.debug("Session token rejected: %s", e)
            return None

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject.strip():
            return None
        return subject
