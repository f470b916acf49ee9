"""
MediScan API: Endpoint Tests
=============================

What:  Exercises the HTTP surface through the full middleware chain.
How:   HTTPX AsyncClient over ASGITransport; collaborators are AsyncMocks
       injected through create_app(), identities are signed HS256 tokens.

What we test:
    ✅ Auth gate: 401 without identity, no collaborator call made
    ✅ Test, doctor and public routes pass the gate without identity
    ✅ Unclassified paths denied by default, allowed when disabled
    ✅ Success envelopes of every endpoint
    ✅ Health query validation boundaries (400)
    ✅ Collaborator failures mapped to 500 with details
    ✅ Unexpected errors keep the request ID and CORS headers
    ✅ Trailing-slash paths classified like their bare form
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from mediscan.exceptions import DocumentStoreError, LLMServiceError, ValidationError

PROTECTED_ENDPOINTS = [
    ("GET", "/api/analytics/mongo"),
    ("POST", "/api/health-query"),
    ("GET", "/api/payments/history"),
    ("GET", "/api/reports/mongo"),
    ("GET", "/api/reports/user"),
    ("GET", "/api/subscription/status"),
    ("GET", "/api/user-data"),
]


def assert_no_collaborator_calls(store, assistant):
    store.get_user_analyses.assert_not_awaited()
    store.get_user_analytics.assert_not_awaited()
    assistant.analyze_health_query.assert_not_awaited()


class TestAuthGate:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, path", PROTECTED_ENDPOINTS)
    async def test_protected_without_identity(self, test_client, fake_store, fake_assistant, method, path):
        response = await test_client.request(method, path, json={"query": "hi"} if method == "POST" else None)

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Unauthorized"
        assert_no_collaborator_calls(fake_store, fake_assistant)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, path", PROTECTED_ENDPOINTS)
    async def test_protected_with_invalid_token(self, test_client, fake_store, make_token, method, path):
        headers = {"Authorization": f"Bearer {make_token(expires_in=-60)}"}
        response = await test_client.request(
            method, path, headers=headers, json={"query": "hi"} if method == "POST" else None
        )
        assert response.status_code == 401
        fake_store.get_user_analyses.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_session_cookie_accepted(self, test_client, make_token):
        test_client.cookies.set("__session", make_token())
        response = await test_client.get("/api/payments/history")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_test_route_needs_no_identity(self, test_client):
        # No handler is mounted; the gate must not answer 401
        response = await test_client.get("/api/test-db")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_doctor_route_bypasses_identity(self, test_client):
        response = await test_client.get("/api/doctor/x")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unclassified_denied_by_default(self, test_client):
        response = await test_client.get("/api/not-in-any-list")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unclassified_with_identity_reaches_router(self, test_client, auth_headers):
        response = await test_client.get("/api/not-in-any-list", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unclassified_pass_through_when_disabled(
        self, fake_store, fake_assistant, identity_provider
    ):
        from mediscan.main import create_app
        app = create_app(
            document_store=fake_store,
            health_assistant=fake_assistant,
            identity_provider=identity_provider,
            deny_unclassified=False,
        )
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/not-in-any-list")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_request_id_echoed_on_rejection(self, test_client):
        response = await test_client.get("/api/reports/mongo", headers={"X-Request-ID": "abc12345"})
        assert response.status_code == 401
        assert response.headers["X-Request-ID"] == "abc12345"
        assert response.json()["request_id"] == "abc12345"


class TestReports:

    @pytest.mark.asyncio
    async def test_reports_mongo(self, test_client, auth_headers, fake_store, sample_analyses):
        response = await test_client.get("/api/reports/mongo", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["reports"] == sample_analyses
        assert body["count"] == 2
        assert body["timestamp"].endswith("Z")
        fake_store.get_user_analyses.assert_awaited_once_with("user_123")

    @pytest.mark.asyncio
    async def test_reports_mongo_is_repeatable(self, test_client, auth_headers):
        first = (await test_client.get("/api/reports/mongo", headers=auth_headers)).json()
        second = (await test_client.get("/api/reports/mongo", headers=auth_headers)).json()
        assert first["count"] == second["count"]
        assert first["reports"] == second["reports"]

    @pytest.mark.asyncio
    async def test_reports_user(self, test_client, auth_headers, sample_analyses):
        response = await test_client.get("/api/reports/user", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"reports": sample_analyses, "success": True, "count": 2}

    @pytest.mark.asyncio
    async def test_user_data(self, test_client, auth_headers, sample_analyses):
        response = await test_client.get("/api/user-data", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["patientData"] == sample_analyses
        assert body["count"] == 2

    @pytest.mark.asyncio
    async def test_empty_reports(self, test_client, auth_headers, fake_store):
        fake_store.get_user_analyses.return_value = []
        response = await test_client.get("/api/reports/mongo", headers=auth_headers)
        assert response.json()["count"] == 0

    @pytest.mark.asyncio
    async def test_store_failure_maps_to_500(self, test_client, auth_headers, fake_store):
        fake_store.get_user_analyses.side_effect = DocumentStoreError(
            message="Failed to fetch analyses", details="connection refused"
        )
        response = await test_client.get("/api/reports/mongo", headers=auth_headers)

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Failed to fetch reports"
        assert body["details"] == "connection refused"

    @pytest.mark.asyncio
    async def test_unexpected_failure_maps_to_500(self, test_client, auth_headers, fake_store):
        fake_store.get_user_analyses.side_effect = RuntimeError("boom")
        response = await test_client.get("/api/reports/user", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["details"] == "boom"


class TestAnalytics:

    @pytest.mark.asyncio
    async def test_analytics(self, test_client, auth_headers, fake_store):
        response = await test_client.get("/api/analytics/mongo", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["analytics"]["totalScans"] == 2
        assert body["analytics"]["anomaliesDetected"] == 1
        assert "timestamp" in body
        fake_store.get_user_analytics.assert_awaited_once_with("user_123")

    @pytest.mark.asyncio
    async def test_analytics_failure(self, test_client, auth_headers, fake_store):
        fake_store.get_user_analytics.side_effect = DocumentStoreError(details="timeout")
        response = await test_client.get("/api/analytics/mongo", headers=auth_headers)

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to generate analytics"
        assert response.json()["details"] == "timeout"


class TestHealthQuery:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["a", "x" * 1000, "What helps with a mild headache?"])
    async def test_accepted_queries(self, test_client, auth_headers, fake_assistant, query):
        response = await test_client.post("/api/health-query", headers=auth_headers, json={"query": query})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["query"] == query
        assert body["response"] == "Stay hydrated and rest."
        fake_assistant.analyze_health_query.assert_awaited_once_with(query, "user_123")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [{"query": ""}, {"query": "   \n\t"}, {"query": "x" * 1001}, {}, {"query": None}, {"query": 42}],
    )
    async def test_rejected_queries(self, test_client, auth_headers, fake_assistant, payload):
        response = await test_client.post("/api/health-query", headers=auth_headers, json=payload)

        assert response.status_code == 400
        assert response.json()["success"] is False
        fake_assistant.analyze_health_query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_too_long_message(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/health-query", headers=auth_headers, json={"query": "x" * 1001}
        )
        assert response.json()["error"] == "Query too long. Please limit to 1000 characters."

    @pytest.mark.asyncio
    async def test_malformed_json(self, test_client, auth_headers):
        response = await test_client.post(
            "/api/health-query",
            headers={**auth_headers, "Content-Type": "application/json"},
            content=b"{not json",
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_assistant_failure(self, test_client, auth_headers, fake_assistant):
        fake_assistant.analyze_health_query.side_effect = LLMServiceError(details="quota exceeded")
        response = await test_client.post(
            "/api/health-query", headers=auth_headers, json={"query": "hello"}
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process health query"
        assert response.json()["details"] == "quota exceeded"


class TestBillingStubs:

    @pytest.mark.asyncio
    async def test_payment_history(self, test_client, auth_headers):
        response = await test_client.get("/api/payments/history", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"payments": []}

    @pytest.mark.asyncio
    async def test_subscription_status(self, test_client, auth_headers):
        response = await test_client.get("/api/subscription/status", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"plan": None, "status": "inactive", "nextBillingDate": None}


class TestDiagnostics:

    @pytest.mark.asyncio
    async def test_test_mongo_without_identity(self, test_client, fake_store):
        response = await test_client.get("/api/test-mongo")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["mongoUri"] == "Not configured"
        assert "timestamp" in body
        fake_store.test_connection.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_test_mongo_reports_configured_without_echo(self, test_client, monkeypatch):
        from mediscan.config import settings
        monkeypatch.setattr(settings, "mongodb_uri", "mongodb://admin:s3cret@db:27017")

        response = await test_client.get("/api/test-mongo")

        assert response.json()["mongoUri"] == "Configured"
        assert "s3cret" not in response.text

    @pytest.mark.asyncio
    async def test_test_mongo_failed_check(self, test_client, fake_store):
        fake_store.test_connection.return_value = {
            "success": False,
            "message": "Database connection failed: timed out",
        }
        response = await test_client.get("/api/test-mongo")

        assert response.status_code == 200
        assert response.json()["success"] is False


class TestLeaderboard:

    @pytest.mark.asyncio
    async def test_public_leaderboard(self, test_client, fake_store):
        fake_store.get_doctor_leaderboard.return_value = {
            "leaderboard": [{"doctorName": "Dr. Ada", "rank": 1}],
            "specializations": ["Cardiology"],
            "currentFilter": "Cardiology",
        }
        response = await test_client.get(
            "/api/leaderboard/doctors", params={"specialization": "Cardiology", "limit": 5}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["currentFilter"] == "Cardiology"
        assert data["leaderboard"][0]["rank"] == 1
        fake_store.get_doctor_leaderboard.assert_awaited_once_with(specialization="Cardiology", limit=5)

    @pytest.mark.asyncio
    async def test_limit_out_of_range(self, test_client):
        response = await test_client.get("/api/leaderboard/doctors", params={"limit": 0})
        assert response.status_code == 400


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_degraded_without_ai(self, test_client, fake_assistant):
        fake_assistant.health_check.return_value = False
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_unhealthy_without_database(self, test_client, fake_store):
        fake_store.ping.return_value = False
        response = await test_client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestTrailingSlash:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/leaderboard/doctors/", "/api/test-mongo/"])
    async def test_open_routes_reach_router_without_identity(self, test_client, path):
        response = await test_client.get(path)
        # FastAPI redirects to the path without the slash
        assert response.status_code == 307
        assert response.headers["location"].endswith(path.rstrip("/"))

    @pytest.mark.asyncio
    async def test_protected_route_still_gated(self, test_client, fake_store):
        response = await test_client.get("/api/reports/mongo/")
        assert response.status_code == 401
        fake_store.get_user_analyses.assert_not_awaited()


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_request_id_and_cors(self, test_client, auth_headers, fake_assistant):
        fake_assistant.analyze_health_query.return_value = None
        headers = {**auth_headers, "X-Request-ID": "rid12345", "Origin": "http://localhost:3000"}

        response = await test_client.post("/api/health-query", headers=headers, json={"query": "hello"})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "An unexpected error occurred. Please try again or contact support.",
            "request_id": "rid12345",
        }
        assert response.headers["X-Request-ID"] == "rid12345"
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    @pytest.mark.asyncio
    async def test_generated_request_id_in_unexpected_error(self, test_client, auth_headers, fake_assistant):
        fake_assistant.analyze_health_query.return_value = None

        response = await test_client.post("/api/health-query", headers=auth_headers, json={"query": "hello"})

        assert response.status_code == 500
        rid = response.headers["X-Request-ID"]
        assert len(rid) == 8
        assert response.json()["request_id"] == rid

    def test_validation_error_field_kept_in_context(self):
        error = ValidationError(message="Health query is required", field="query")
        assert error.context == {"field": "query"}
        assert error.status_code == 400


class TestAccessLog:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path, route_class",
        [("/api/leaderboard/doctors", "public"), ("/api/reports/mongo", "protected")],
    )
    async def test_route_class_logged(self, test_client, caplog, path, route_class):
        caplog.set_level(logging.INFO, logger="mediscan.access")

        await test_client.get(path)

        records = [r for r in caplog.records if r.name == "mediscan.access"]
        assert len(records) == 1
        assert records[0].route_class == route_class
        assert records[0].authenticated is False
