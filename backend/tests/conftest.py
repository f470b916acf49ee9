"""
MediScan API: Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Collaborators are replaced with AsyncMock fakes and injected through
       create_app(); session tokens are real HS256 JWTs signed with a test key.

Fixtures:
    ├── fake_store:         AsyncMock DocumentStore
    ├── fake_assistant:     AsyncMock HealthAssistant
    ├── identity_provider:  SessionTokenIdentityProvider with the test key
    ├── make_token:         builds signed session tokens
    ├── auth_headers:       Authorization header for user "user_123"
    └── test_client:        HTTPX AsyncClient bound to a fresh app
"""

import os
import time
from unittest.mock import AsyncMock

# Override settings BEFORE any mediscan import
os.environ["MONGODB_URI"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["AUTH_JWT_KEY"] = "test-session-signing-key-0123456789abcdef"
os.environ["AUTH_JWT_ALGORITHMS"] = "HS256"
os.environ["LOG_LEVEL"] = "WARNING"

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mediscan.services.document_store import DocumentStore
from mediscan.services.identity import SessionTokenIdentityProvider
from mediscan.services.llm_base import HealthAssistant

TEST_JWT_KEY = os.environ["AUTH_JWT_KEY"]
TEST_USER_ID = "user_123"


@pytest.fixture
def make_token():
    """
    Returns a function building signed session tokens.

    Usage:
        token = make_token("user_42", expires_in=-10)  # already expired
    """
    def _make(sub=TEST_USER_ID, expires_in=3600, key=TEST_JWT_KEY, **claims):
        payload = {"exp": int(time.time()) + expires_in, **claims}
        if sub is not None:
            payload["sub"] = sub
        return jwt.encode(payload, key, algorithm="HS256")
    return _make


@pytest.fixture
def auth_headers(make_token):
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def identity_provider():
    return SessionTokenIdentityProvider(key=TEST_JWT_KEY, algorithms=["HS256"])


@pytest.fixture
def sample_analyses():
    """Two analyses as the document store returns them, newest first."""
    return [
        {
            "_id": "65a4f0c2e13b5a0012345679",
            "analysisId": "analysis_lr5x1k2a_k3j9d0q2m",
            "userId": TEST_USER_ID,
            "imageType": "brain",
            "anomalyDetected": True,
            "confidence": 0.92,
            "status": "completed",
            "createdAt": "2024-01-15T12:00:00+00:00",
            "patient": {"name": "Jane Doe"},
        },
        {
            "_id": "65a4f0c2e13b5a0012345678",
            "analysisId": "analysis_lr5w9z1b_a8d7f6e5c",
            "userId": TEST_USER_ID,
            "imageType": "lungs",
            "anomalyDetected": False,
            "confidence": 0.88,
            "status": "completed",
            "createdAt": "2024-01-14T09:30:00+00:00",
            "patient": {"name": "John Roe"},
        },
    ]


@pytest.fixture
def fake_store(sample_analyses):
    """AsyncMock document store preloaded with ``sample_analyses``."""
    store = AsyncMock(spec=DocumentStore)
    store.get_user_analyses.return_value = sample_analyses
    store.get_user_analytics.return_value = {
        "totalScans": 2,
        "anomaliesDetected": 1,
        "normalScans": 1,
        "averageConfidence": 0.9,
        "scansByType": {"brain": 1, "heart": 0, "lungs": 1, "liver": 0},
        "recentActivity": [],
    }
    store.test_connection.return_value = {
        "success": True,
        "message": "Database connection and operations working correctly",
    }
    store.get_doctor_leaderboard.return_value = {
        "leaderboard": [],
        "specializations": [],
        "currentFilter": "all",
    }
    store.ping.return_value = True
    return store


@pytest.fixture
def fake_assistant():
    assistant = AsyncMock(spec=HealthAssistant)
    assistant.analyze_health_query.return_value = "Stay hydrated and rest."
    assistant.health_check.return_value = True
    return assistant


@pytest.fixture
def app(fake_store, fake_assistant, identity_provider):
    from mediscan.main import create_app
    return create_app(
        document_store=fake_store,
        health_assistant=fake_assistant,
        identity_provider=identity_provider,
        deny_unclassified=True,
    )


@pytest_asyncio.fixture
async def test_client(app):
    """
    Async HTTP client talking to the app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
