"""
MediScan API: Route Access Table
=================================

What:  Classifies a request path into an access category.
How:   An ordered list of (pattern, classification) pairs evaluated in a
       fixed loop. The first *list* that matches wins, so a Test pattern
       beats a Protected one even when the Protected pattern is more specific.
Who:   Used by AuthGateMiddleware on every request.

Pattern syntax:
    "/api/user-data"       exact path
    "/api/reports(.*)"     the path plus any suffix (prefix match)

A single trailing slash on the request path is ignored before matching.

Evaluation order:
    TEST → DOCTOR_AUTH → PUBLIC → PROTECTED → UNCLASSIFIED
"""

import enum
from dataclasses import dataclass
from typing import List, Sequence, Tuple

WILDCARD_SUFFIX = "(.*)"


class RouteClass(str, enum.Enum):
    TEST = "test"
    DOCTOR_AUTH = "doctor_auth"
    PUBLIC = "public"
    PROTECTED = "protected"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class RoutePattern:
    """A single exact or prefix path pattern."""

    path: str
    prefix: bool = False

    @classmethod
    def parse(cls, raw: str) -> "RoutePattern":
        if raw.endswith(WILDCARD_SUFFIX):
            return cls(path=raw[: -len(WILDCARD_SUFFIX)], prefix=True)
        return cls(path=raw)

    def matches(self, path: str) -> bool:
        if self.prefix:
            return path.startswith(self.path)
        return path == self.path


TEST_ROUTES = (
    "/api/test-db",
    "/api/test-upload",
    "/api/test-env",
    "/api/test-mongo",
)

# Doctors sign in through their own credential flow, not the session provider
DOCTOR_ROUTES = (
    "/dashboard/doctor(.*)",
    "/api/doctor(.*)",
)

PUBLIC_ROUTES = (
    "/api/reviews/doctor",
    "/api/leaderboard/doctors",
    "/leaderboard",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
)

PROTECTED_ROUTES = (
    "/dashboard/user(.*)",
    "/api/upload",
    "/api/analysis(.*)",
    "/api/analytics(.*)",
    "/api/patients(.*)",
    "/api/reports(.*)",
    "/api/payments(.*)",
    "/api/subscription(.*)",
    "/api/generate-pdf",
    "/api/generate-pdf-pinata",
    "/api/user-data",
    "/api/reviews/create",
    "/api/bookings(.*)",
    "/api/health-query",
    "/api/health",
)


def build_access_table(
    groups: Sequence[Tuple[RouteClass, Sequence[str]]],
) -> List[Tuple[RoutePattern, RouteClass]]:
    """Flattens classification groups into ordered (pattern, class) pairs."""
    table = []
    for route_class, patterns in groups:
        for raw in patterns:
            table.append((RoutePattern.parse(raw), route_class))
    return table


ACCESS_TABLE = build_access_table(
    [
        (RouteClass.TEST, TEST_ROUTES),
        (RouteClass.DOCTOR_AUTH, DOCTOR_ROUTES),
        (RouteClass.PUBLIC, PUBLIC_ROUTES),
        (RouteClass.PROTECTED, PROTECTED_ROUTES),
    ]
)


def classify(
    path: str,
    table: Sequence[Tuple[RoutePattern, RouteClass]] = ACCESS_TABLE,
) -> RouteClass:
    """
    Return the classification of ``path``.

    The table is grouped by class in priority order, so the first matching
    entry is also the first matching list.

    A single trailing slash is ignored, so "/leaderboard/" classifies like
    "/leaderboard". The root path "/" is kept as is.
    """
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    for pattern, route_class in table:
        if pattern.matches(path):
            return route_class
    return RouteClass.UNCLASSIFIED


def requires_identity(route_class: RouteClass, deny_unclassified: bool = True) -> bool:
    """Whether the gate must see a caller identity for this classification."""
    if route_class is RouteClass.PROTECTED:
        return True
    if route_class is RouteClass.UNCLASSIFIED:
        return deny_unclassified
    return False
