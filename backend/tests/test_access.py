"""
MediScan API: Route Access Table Tests
=======================================

What we test:
    ✅ Each list classifies its own paths
    ✅ Prefix patterns match the bare path and any suffix
    ✅ Exact patterns do not match longer paths
    ✅ List priority wins over pattern specificity
    ✅ Unclassified fallback and the identity requirement per class
"""

import pytest

from mediscan.access import (
    RouteClass,
    RoutePattern,
    build_access_table,
    classify,
    requires_identity,
)


class TestRoutePattern:

    def test_parse_exact(self):
        pattern = RoutePattern.parse("/api/user-data")
        assert pattern == RoutePattern(path="/api/user-data", prefix=False)

    def test_parse_prefix(self):
        pattern = RoutePattern.parse("/api/reports(.*)")
        assert pattern == RoutePattern(path="/api/reports", prefix=True)

    def test_prefix_matches_bare_and_suffixed_paths(self):
        pattern = RoutePattern.parse("/api/reports(.*)")
        assert pattern.matches("/api/reports")
        assert pattern.matches("/api/reports/mongo")
        assert pattern.matches("/api/reports/user")
        assert not pattern.matches("/api/report")

    def test_exact_does_not_match_suffix(self):
        pattern = RoutePattern.parse("/api/upload")
        assert pattern.matches("/api/upload")
        assert not pattern.matches("/api/upload/1")


class TestClassify:

    @pytest.mark.parametrize("path", ["/api/test-db", "/api/test-upload", "/api/test-env", "/api/test-mongo"])
    def test_test_routes(self, path):
        assert classify(path) is RouteClass.TEST

    @pytest.mark.parametrize("path", ["/api/doctor/x", "/api/doctor", "/dashboard/doctor/cases"])
    def test_doctor_routes(self, path):
        assert classify(path) is RouteClass.DOCTOR_AUTH

    @pytest.mark.parametrize("path", ["/api/leaderboard/doctors", "/api/reviews/doctor", "/leaderboard", "/health"])
    def test_public_routes(self, path):
        assert classify(path) is RouteClass.PUBLIC

    @pytest.mark.parametrize(
        "path",
        [
            "/dashboard/user/42",
            "/api/analytics/mongo",
            "/api/health-query",
            "/api/payments/history",
            "/api/reports/mongo",
            "/api/reports/user",
            "/api/subscription/status",
            "/api/user-data",
            "/api/bookings/create",
        ],
    )
    def test_protected_routes(self, path):
        assert classify(path) is RouteClass.PROTECTED

    @pytest.mark.parametrize("path", ["/", "/api/unknown", "/api/reviews/create/extra", "/dashboard"])
    def test_unclassified(self, path):
        assert classify(path) is RouteClass.UNCLASSIFIED

    def test_list_order_beats_specificity(self):
        """An earlier list wins even if a later list has a more specific entry."""
        table = build_access_table([
            (RouteClass.PUBLIC, ["/api(.*)"]),
            (RouteClass.PROTECTED, ["/api/reports/mongo"]),
        ])
        assert classify("/api/reports/mongo", table) is RouteClass.PUBLIC

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/api/test-mongo/", RouteClass.TEST),
            ("/api/doctor/", RouteClass.DOCTOR_AUTH),
            ("/api/leaderboard/doctors/", RouteClass.PUBLIC),
            ("/leaderboard/", RouteClass.PUBLIC),
            ("/health/", RouteClass.PUBLIC),
            ("/api/user-data/", RouteClass.PROTECTED),
            ("/api/reports/", RouteClass.PROTECTED),
        ],
    )
    def test_trailing_slash_ignored(self, path, expected):
        assert classify(path) is expected

    def test_only_one_trailing_slash_ignored(self):
        assert classify("/leaderboard//") is RouteClass.UNCLASSIFIED

    def test_root_path_kept(self):
        assert classify("/") is RouteClass.UNCLASSIFIED

    def test_health_query_is_not_public_health(self):
        assert classify("/api/health") is RouteClass.PROTECTED
        assert classify("/health") is RouteClass.PUBLIC


class TestRequiresIdentity:

    def test_protected_requires_identity(self):
        assert requires_identity(RouteClass.PROTECTED) is True

    @pytest.mark.parametrize("route_class", [RouteClass.TEST, RouteClass.DOCTOR_AUTH, RouteClass.PUBLIC])
    def test_open_classes(self, route_class):
        assert requires_identity(route_class) is False

    def test_unclassified_default_deny(self):
        assert requires_identity(RouteClass.UNCLASSIFIED) is True

    def test_unclassified_pass_through_when_disabled(self):
        assert requires_identity(RouteClass.UNCLASSIFIED, deny_unclassified=False) is False
