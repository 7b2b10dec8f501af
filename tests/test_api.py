"""
API tests for the Content Moderation Gateway.

The vision model is never called: the judgment function is patched at the
gateway and settings are injected through FastAPI dependency overrides.
"""

import json

import httpx
import pytest
from unittest.mock import patch, AsyncMock
from fastapi.testclient import TestClient

from main import app
from app.core.config import Settings, get_settings

JUDGE = "app.services.moderation_service.request_moderation_judgment"
ANALYZE = "app.services.analysis_service.request_content_analysis"
AUTH = {"Authorization": "Bearer test-token"}


def make_settings(**overrides):
    values = {"openai_api_key": "test-key"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def client():
    """Create test client with a configured API key."""
    app.dependency_overrides[get_settings] = lambda: make_settings()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_client():
    """Create test client without an OpenAI API key."""
    app.dependency_overrides[get_settings] = lambda: make_settings(openai_api_key=None)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def moderate(client, payload, headers=AUTH):
    return client.post("/moderate", json=payload, headers=headers)


class TestAuthGate:
    """Test the Authorization header gate."""

    def test_missing_authorization_is_rejected(self, client):
        with patch(JUDGE, new=AsyncMock()) as judge:
            response = moderate(client, {"filename": "a.jpg", "type": "image/jpeg"}, headers={})

        assert response.status_code == 401
        assert response.json() == {"code": 401, "message": "Missing authorization header"}
        judge.assert_not_awaited()

    def test_empty_authorization_is_rejected(self, client):
        response = moderate(client, {"filename": "a.jpg", "type": "image/jpeg"}, headers={"Authorization": ""})
        assert response.status_code == 401

    def test_any_authorization_value_passes(self, client):
        verdict = '{"status": "passed", "confidence": 95, "issues": []}'
        with patch(JUDGE, new=AsyncMock(return_value=verdict)):
            response = moderate(
                client,
                {"filename": "a.jpg", "type": "image/jpeg"},
                headers={"Authorization": "anything"}
            )
        assert response.status_code == 200

    def test_trusted_local_host_skips_authorization(self, client):
        verdict = '{"status": "passed", "confidence": 95, "issues": []}'
        with patch(JUDGE, new=AsyncMock(return_value=verdict)):
            response = moderate(
                client,
                {"filename": "a.jpg", "type": "image/jpeg"},
                headers={"Host": "localhost:54321"}
            )
        assert response.status_code == 200

    def test_trusted_hosts_come_from_injected_settings(self):
        app.dependency_overrides[get_settings] = lambda: make_settings(trusted_local_hosts=["testserver"])
        verdict = '{"status": "passed", "confidence": 95, "issues": []}'
        try:
            with TestClient(app) as c, patch(JUDGE, new=AsyncMock(return_value=verdict)):
                response = moderate(c, {"filename": "a.jpg", "type": "image/jpeg"}, headers={})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 200
        assert response.json()["status"] == "passed"

    def test_default_trusted_host_can_be_revoked(self):
        app.dependency_overrides[get_settings] = lambda: make_settings(trusted_local_hosts=[])
        try:
            with TestClient(app) as c:
                response = moderate(
                    c,
                    {"filename": "a.jpg", "type": "image/jpeg"},
                    headers={"Host": "localhost:54321"}
                )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 401

    def test_auth_is_checked_before_validation(self, client):
        response = moderate(client, {}, headers={})
        assert response.status_code == 401


class TestRequestValidation:
    """Test inbound request validation."""

    def test_missing_fields(self, client):
        for payload in [{}, {"filename": "a.jpg"}, {"type": "image/jpeg"}, {"filename": "", "type": "image/jpeg"}]:
            response = moderate(client, payload)
            assert response.status_code == 400, payload
            assert response.json() == {"error": "Missing filename or type"}

    def test_missing_body(self, client):
        response = client.post("/moderate", headers=AUTH)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing filename or type"}

    def test_malformed_body(self, client):
        response = moderate(client, {"filename": ["a.jpg"], "type": "image/jpeg"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}


class TestCors:
    """Test CORS handling."""

    def test_bare_options_request(self, client):
        response = client.options("/moderate")
        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-headers"] == (
            "authorization, x-client-info, apikey, content-type"
        )

    def test_browser_preflight(self, client):
        response = client.options(
            "/moderate",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            }
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_error_responses_carry_cors_headers(self, client):
        response = moderate(client, {}, headers={})
        assert response.headers["access-control-allow-origin"] == "*"


class TestModerationScenarios:
    """End-to-end moderation decisions through the HTTP endpoint."""

    def test_clean_content_passes(self, client):
        verdict = '{"status": "passed", "confidence": 95, "issues": []}'
        with patch(JUDGE, new=AsyncMock(return_value=verdict)) as judge:
            response = moderate(client, {"filename": "sunset.jpg", "type": "image/jpeg"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "passed"
        assert data["issues"] == []
        assert data["violation_category"] is None

        request = judge.await_args.args[0]
        assert request.filename == "sunset.jpg"
        assert request.declared_type == "image/jpeg"

    def test_explicit_violation_is_blocked(self, client):
        verdict = json.dumps({
            "status": "failed",
            "violation_category": "adult_content_nudity",
            "issues": [{
                "category": "adult_content_nudity",
                "description": "Exposed intimate anatomy",
                "severity": "high",
                "confidence": 88,
            }],
        })
        with patch(JUDGE, new=AsyncMock(return_value=verdict)):
            response = moderate(client, {
                "filename": "beach.png",
                "type": "image/png",
                "caption": "summer",
                "imageData": "data:image/png;base64,iVBORw0KGgo=",
            })

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["violation_category"] == "adult_content_nudity"
        assert len(data["issues"]) == 1
        assert data["issues"][0]["blocking_reason"]

    def test_under_called_severity_is_blocked(self, client):
        verdict = json.dumps({
            "status": "passed",
            "issues": [{"category": "misc", "description": "borderline", "severity": "low", "confidence": 10}],
        })
        with patch(JUDGE, new=AsyncMock(return_value=verdict)):
            response = moderate(client, {"filename": "cat.jpg", "type": "image/jpeg"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["issues"][0]["category"] == "misc"

    def test_upstream_outage_is_blocked(self, client):
        with patch(JUDGE, new=AsyncMock(side_effect=httpx.ConnectError("network down"))):
            response = moderate(client, {"filename": "cat.jpg", "type": "image/jpeg"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["violation_category"] == "system_error"
        assert data["confidence"] == 100
        assert len(data["issues"]) == 1

    def test_malformed_model_output_is_blocked(self, client):
        with patch(JUDGE, new=AsyncMock(return_value="I think this image is fine!")):
            response = moderate(client, {"filename": "cat.jpg", "type": "image/jpeg"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["issues"][0]["category"] == "Analysis Error"

    def test_non_finite_model_confidence_is_blocked(self, client):
        verdict = (
            '{"status": "failed", "confidence": NaN, "issues": '
            '[{"category": "adult", "description": "nudity", "severity": "high", "confidence": 90}]}'
        )
        with patch(JUDGE, new=AsyncMock(return_value=verdict)):
            response = moderate(client, {"filename": "cat.jpg", "type": "image/jpeg"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["violation_category"] == "system_error"

    def test_missing_api_key_is_blocked(self, unconfigured_client):
        with patch(JUDGE, new=AsyncMock()) as judge:
            response = moderate(unconfigured_client, {"filename": "cat.jpg", "type": "image/jpeg"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["issues"][0]["category"] == "Configuration Error"
        judge.assert_not_awaited()

    def test_request_id_header(self, client):
        verdict = '{"status": "passed", "issues": []}'
        with patch(JUDGE, new=AsyncMock(return_value=verdict)):
            response = moderate(client, {"filename": "cat.jpg", "type": "image/jpeg"})
        assert "x-request-id" in response.headers


class TestAnalysisEndpoint:
    """Test the advisory comment/story analysis endpoint."""

    def test_comment_analysis(self, client):
        with patch(ANALYZE, new=AsyncMock(return_value='{"sentiment": "positive"}')) as analyze:
            response = client.post(
                "/analyze",
                json={"type": "comment", "content": "Love this!", "context": "beach photo"}
            )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "analysis": '{"sentiment": "positive"}',
            "type": "comment",
        }
        args, kwargs = analyze.await_args
        assert args[0] == "comment"
        assert args[1] == "Love this!"
        assert kwargs["context"] == "beach photo"

    def test_missing_api_key(self, unconfigured_client):
        response = unconfigured_client.post("/analyze", json={"type": "story", "content": "sunset"})
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "OpenAI API key not configured"}

    def test_upstream_failure(self, client):
        from app.core.exceptions import LLMServiceException

        with patch(ANALYZE, new=AsyncMock(side_effect=LLMServiceException("OpenAI API error: timeout"))):
            response = client.post("/analyze", json={"type": "story", "content": "sunset"})

        assert response.status_code == 500
        assert response.json()["success"] is False

    def test_unknown_type(self, client):
        response = client.post("/analyze", json={"type": "reel", "content": "sunset"})
        assert response.status_code == 400


class TestMonitoringEndpoints:
    """Test health and root endpoints."""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "timestamp" in data
        assert "version" in data

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["endpoints"]["moderation"] == "/moderate"
