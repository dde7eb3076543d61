"""
Profile Routes Integration Tests
================================
"""

import pytest
from fastapi.testclient import TestClient

from portal.models.user import User
from portal.services.auth_service import AuthService


pytestmark = pytest.mark.integration


class TestProfile:

    def test_get_profile_without_member(self, client: TestClient, user_headers: dict, plain_user: User):
        data = client.get("/user/profile", headers=user_headers).json()

        assert data["email"] == plain_user.email
        assert data["member"] is None

    def test_get_profile_with_member(self, client: TestClient, user_headers: dict, plain_user: User, make_member):
        make_member("Ulla User", "ulla@portal.test", user=plain_user)

        data = client.get("/user/profile", headers=user_headers).json()
        assert data["member"]["name"] == "Ulla User"

    def test_update_mirrors_bio_to_member(self, client: TestClient, user_headers: dict, plain_user: User, make_member):
        member = make_member("Ulla User", "ulla@portal.test", user=plain_user)

        response = client.put(
            "/user/profile",
            json={"name": "Ulla U.", "bio": "Public servant", "organization": "Ministry"},
            headers=user_headers,
        )

        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Ulla U."
        assert member.bio == "Public servant"
        assert member.organization == "Ministry"

    def test_blank_name_rejected(self, client: TestClient, user_headers: dict, plain_user: User):
        response = client.put("/user/profile", json={"name": "   "}, headers=user_headers)

        assert response.status_code == 422
        assert plain_user.name == "Ulla User"

    def test_email_taken(self, client: TestClient, user_headers: dict, official_user: User):
        response = client.put("/user/profile", json={"email": official_user.email}, headers=user_headers)
        assert response.status_code == 422

    def test_pending_account_blocked(self, client: TestClient, pending_headers: dict):
        assert client.get("/user/profile", headers=pending_headers).status_code == 403


class TestChangePassword:

    def test_change_password_logs_out(self, client: TestClient, user_headers: dict, plain_user: User, test_password: str):
        # Act
        response = client.post(
            "/user/change-password",
            json={
                "current_password": test_password,
                "new_password": "AnotherPassword1",
                "confirm_password": "AnotherPassword1",
            },
            headers=user_headers,
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["should_logout"] is True
        assert AuthService.verify_password("AnotherPassword1", plain_user.hashed_password)
        assert client.get("/user/profile", headers=user_headers).status_code == 401

    def test_wrong_current_password(self, client: TestClient, user_headers: dict):
        response = client.post(
            "/user/change-password",
            json={
                "current_password": "nope",
                "new_password": "AnotherPassword1",
                "confirm_password": "AnotherPassword1",
            },
            headers=user_headers,
        )
        assert response.status_code == 400

    def test_confirmation_mismatch(self, client: TestClient, user_headers: dict, test_password: str):
        response = client.post(
            "/user/change-password",
            json={
                "current_password": test_password,
                "new_password": "AnotherPassword1",
                "confirm_password": "AnotherPassword2",
            },
            headers=user_headers,
        )
        assert response.status_code == 422
