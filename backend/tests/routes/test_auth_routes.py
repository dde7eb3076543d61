"""
Authentication Routes Integration Tests
=======================================

Integration tests for:
- POST /auth/register (account starts pending)
- POST /auth/login, /auth/refresh, /auth/logout
- GET /auth/me and /auth/navigation
- GET /pending-approval
"""

import pytest
from fastapi.testclient import TestClient

from portal.models.user import User


pytestmark = pytest.mark.integration


class TestRegister:

    def test_register_creates_pending_account(self, client: TestClient, notifications):
        # Act
        response = client.post(
            "/auth/register",
            json={"name": "Jane Citizen", "email": "Jane@Example.com", "password": "long-enough"},
        )

        # Assert
        assert response.status_code == 201
        assert response.json()["lifecycle_state"] == "PENDING"
        assert notifications.subjects_for("jane@example.com") == ["Welcome to Content Portal"]

    def test_duplicate_email(self, client: TestClient, plain_user: User):
        response = client.post(
            "/auth/register",
            json={"name": "Again", "email": plain_user.email, "password": "long-enough"},
        )
        assert response.status_code == 422

    def test_validation_error_shape(self, client: TestClient):
        response = client.post("/auth/register", json={"name": "J", "email": "bad", "password": "x"})

        assert response.status_code == 422
        fields = {e["field"] for e in response.json()["details"]["errors"]}
        assert {"body.name", "body.email", "body.password"} <= fields


class TestLogin:

    def test_login_success(self, client: TestClient, plain_user: User, test_password: str):
        response = client.post("/auth/login", json={"email": plain_user.email, "password": test_password})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"] and data["refresh_token"]

    def test_pending_account_can_login(self, client: TestClient, pending_user: User, test_password: str):
        response = client.post("/auth/login", json={"email": pending_user.email, "password": test_password})
        assert response.status_code == 200

    def test_wrong_password(self, client: TestClient, plain_user: User):
        response = client.post("/auth/login", json={"email": plain_user.email, "password": "WrongPassword!"})

        assert response.status_code == 401
        assert plain_user.failed_attempts == 1

    def test_locked_account(self, client: TestClient, make_user, test_password: str):
        user = make_user("locked@portal.test", is_locked=True)
        response = client.post("/auth/login", json={"email": user.email, "password": test_password})
        assert response.status_code == 403


class TestTokenLifecycle:

    def test_refresh(self, client: TestClient, plain_user: User, test_password: str):
        tokens = client.post("/auth/login", json={"email": plain_user.email, "password": test_password}).json()

        response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        assert response.status_code == 200
        assert "access_token" in response.json()

    def test_access_token_not_accepted_for_refresh(self, client: TestClient, user_headers: dict):
        access = user_headers["Authorization"].split(" ", 1)[1]
        assert client.post("/auth/refresh", json={"refresh_token": access}).status_code == 401

    def test_logout_invalidates_token(self, client: TestClient, user_headers: dict):
        assert client.post("/auth/logout", headers=user_headers).status_code == 200
        assert client.get("/auth/me", headers=user_headers).status_code == 401

    def test_invalid_token(self, client: TestClient):
        response = client.get("/auth/me", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401


class TestMe:

    def test_active_account(self, client: TestClient, official_headers: dict):
        data = client.get("/auth/me", headers=official_headers).json()

        assert data["roles"] == ["OFFICIAL"]
        assert data["lifecycle_state"] == "ACTIVE"
        assert "/admin" not in data["reachable_surfaces"]

    def test_pending_account(self, client: TestClient, pending_headers: dict):
        data = client.get("/auth/me", headers=pending_headers).json()

        assert data["roles"] == []
        assert data["lifecycle_state"] == "PENDING"
        assert data["reachable_surfaces"] == ["/logout", "/pending-approval"]

    def test_administrator(self, client: TestClient, admin_headers: dict):
        assert client.get("/auth/me", headers=admin_headers).json()["lifecycle_state"] == "ADMINISTRATOR"


class TestNavigation:

    def test_anonymous(self, client: TestClient):
        data = client.get("/auth/navigation", params={"path": "/documents"}).json()

        assert data["allowed"] is False
        assert data["redirect_to"] == "/login"
        assert data["lifecycle_state"] is None

    def test_pending(self, client: TestClient, pending_headers: dict):
        data = client.get("/auth/navigation", params={"path": "/members"}, headers=pending_headers).json()
        assert data["redirect_to"] == "/pending-approval"

    def test_non_admin_on_admin_area(self, client: TestClient, moderator_headers: dict):
        data = client.get("/auth/navigation", params={"path": "/admin/users"}, headers=moderator_headers).json()
        assert data == {
            "path": "/admin/users",
            "allowed": False,
            "redirect_to": "/",
            "lifecycle_state": "ACTIVE",
        }

    def test_admin_on_admin_area(self, client: TestClient, admin_headers: dict):
        data = client.get("/auth/navigation", params={"path": "/admin"}, headers=admin_headers).json()
        assert data["allowed"] is True


class TestPendingApprovalSurface:

    def test_pending_account_sees_notice(self, client: TestClient, pending_headers: dict, pending_user: User):
        response = client.get("/pending-approval", headers=pending_headers)

        assert response.status_code == 200
        assert response.json()["email"] == pending_user.email

    def test_active_account_redirected_home(self, client: TestClient, user_headers: dict):
        response = client.get("/pending-approval", headers=user_headers, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/"

    def test_anonymous_redirected_to_sign_in(self, client: TestClient):
        response = client.get("/pending-approval", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/login"
