"""
Request Middleware Tests
========================

Tests for middleware components including:
- AuthMiddleware
- SecurityHeadersMiddleware
- RateLimitMiddleware
"""

import pytest
from fastapi.testclient import TestClient

from portal.core.config import settings


pytestmark = pytest.mark.middleware


class TestAuthMiddleware:

    def test_request_id_header_added(self, client: TestClient):
        response = client.get("/")

        assert len(response.headers["X-Request-ID"]) > 0
        assert "X-Process-Time" in response.headers

    def test_incoming_request_id_echoed(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"


class TestSecurityHeadersMiddleware:

    def test_headers_present(self, client: TestClient):
        response = client.get("/")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "frame-ancestors 'none'" in response.headers["Content-Security-Policy"]

    def test_no_hsts_outside_production(self, client: TestClient):
        assert "Strict-Transport-Security" not in client.get("/").headers


class TestRateLimitMiddleware:

    def test_login_rate_limited(self, client: TestClient, monkeypatch):
        # Arrange
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "LOGIN_RATE_LIMIT", 2)
        credentials = {"email": "nobody@portal.test", "password": "whatever"}

        # Act
        statuses = [client.post("/auth/login", json=credentials).status_code for _ in range(3)]

        # Assert
        assert statuses == [401, 401, 429]

    def test_other_paths_not_limited(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
        monkeypatch.setattr(settings, "LOGIN_RATE_LIMIT", 1)

        assert all(client.get("/").status_code == 200 for _ in range(3))


class TestHealthEndpoints:

    def test_root(self, client: TestClient):
        assert client.get("/").json()["status"] == "healthy"

    def test_ready(self, client: TestClient):
        assert client.get("/ready").json() == {"status": "ready"}
