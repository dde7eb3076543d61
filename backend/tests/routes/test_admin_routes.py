"""
Admin Routes Integration Tests
==============================

Integration tests for admin endpoints including:
- GET /admin/dashboard
- GET /admin/users (search, role filter, pending filter)
- GET /admin/users/linkable
- PUT /admin/users/{user_id}/roles
- DELETE /admin/users/{user_id}
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from uuid import uuid4

from portal.core.enums import ContentStatus
from portal.models.role_enum import Role
from portal.models.user import User


pytestmark = pytest.mark.integration


class TestAdminDashboardEndpoint:

    def test_admin_access(self, client: TestClient, admin_headers: dict, pending_user: User):
        response = client.get("/admin/dashboard", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_users"] == 2
        assert data["pending_users"] == 1
        assert data["role_counts"]["ADMIN"] == 1

    @pytest.mark.parametrize("headers_fixture", ["official_headers", "moderator_headers", "user_headers"])
    def test_non_admin_denied(self, client: TestClient, request, headers_fixture):
        response = client.get("/admin/dashboard", headers=request.getfixturevalue(headers_fixture))

        assert response.status_code == 403
        assert response.json()["details"]["required_roles"] == ["ADMIN"]

    def test_pending_account_redirected(self, client: TestClient, pending_headers: dict):
        response = client.get("/admin/dashboard", headers=pending_headers)

        assert response.status_code == 403
        assert response.json()["details"]["redirect_to"] == "/pending-approval"

    def test_unauthenticated(self, client: TestClient):
        assert client.get("/admin/dashboard").status_code == 401


class TestListUsersEndpoint:

    def test_list_all(self, client: TestClient, admin_headers: dict, plain_user: User, pending_user: User):
        response = client.get("/admin/users", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["total"] == 3

    def test_pending_filter(self, client: TestClient, admin_headers: dict, plain_user: User, pending_user: User):
        response = client.get("/admin/users", params={"role": "none"}, headers=admin_headers)

        emails = [u["email"] for u in response.json()["users"]]
        assert emails == [pending_user.email]

    def test_role_filter(self, client: TestClient, admin_headers: dict, official_user: User, plain_user: User):
        response = client.get("/admin/users", params={"role": "official"}, headers=admin_headers)

        assert [u["email"] for u in response.json()["users"]] == [official_user.email]

    def test_unknown_role_filter(self, client: TestClient, admin_headers: dict):
        response = client.get("/admin/users", params={"role": "wizard"}, headers=admin_headers)
        assert response.status_code == 422

    def test_search(self, client: TestClient, admin_headers: dict, official_user: User, plain_user: User):
        response = client.get("/admin/users", params={"search": "olga"}, headers=admin_headers)
        assert [u["id"] for u in response.json()["users"]] == [str(official_user.id)]

    def test_linkable_excludes_linked_accounts(
        self, client: TestClient, admin_headers: dict, admin_user: User, plain_user: User, make_member
    ):
        make_member("Ulla User", "ulla@portal.test", user=plain_user)

        response = client.get("/admin/users/linkable", headers=admin_headers)

        assert response.status_code == 200
        assert [u["id"] for u in response.json()] == [str(admin_user.id)]

    def test_get_user_not_found(self, client: TestClient, admin_headers: dict):
        assert client.get(f"/admin/users/{uuid4()}", headers=admin_headers).status_code == 404


class TestAssignRolesEndpoint:

    def test_approve_pending_account(
        self, client: TestClient, admin_headers: dict, pending_user: User, notifications, headers_for
    ):
        # Act
        response = client.put(
            f"/admin/users/{pending_user.id}/roles",
            json={"roles": ["USER", "OFFICIAL"]},
            headers=admin_headers,
        )

        # Assert
        assert response.status_code == 200
        assert response.json()["roles"] == ["OFFICIAL", "USER"]
        assert notifications.subjects_for(pending_user.email) == ["Your account roles have been updated"]
        assert client.get("/documents", headers=headers_for(pending_user)).status_code == 200

    def test_empty_roles_returns_account_to_pending(
        self, client: TestClient, admin_headers: dict, plain_user: User, headers_for
    ):
        response = client.put(f"/admin/users/{plain_user.id}/roles", json={"roles": []}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["roles"] == []
        blocked = client.get("/documents", headers=headers_for(plain_user))
        assert blocked.status_code == 403
        assert blocked.json()["details"]["lifecycle_state"] == "PENDING"

    def test_cannot_change_own_roles(self, client: TestClient, admin_headers: dict, admin_user: User, notifications):
        response = client.put(f"/admin/users/{admin_user.id}/roles", json={"roles": ["USER"]}, headers=admin_headers)

        assert response.status_code == 400
        assert admin_user.roles == {Role.ADMIN}
        assert notifications.sent == []

    def test_admin_can_change_another_admin(self, client: TestClient, admin_headers: dict, second_admin: User):
        response = client.put(
            f"/admin/users/{second_admin.id}/roles", json={"roles": ["MODERATOR"]}, headers=admin_headers
        )

        assert response.status_code == 200
        assert second_admin.roles == {Role.MODERATOR}

    def test_role_change_applies_to_existing_token(
        self, client: TestClient, admin_headers: dict, plain_user: User, headers_for, make_document, official_user
    ):
        make_document(official_user, "Draft Law", status=ContentStatus.DRAFT)
        user_headers = headers_for(plain_user)
        assert client.get("/documents/draft-law", headers=user_headers).status_code == 403

        client.put(f"/admin/users/{plain_user.id}/roles", json={"roles": ["OFFICIAL"]}, headers=admin_headers)

        assert client.get("/documents/draft-law", headers=user_headers).status_code == 200

    def test_non_admin_denied(self, client: TestClient, moderator_headers: dict, plain_user: User):
        response = client.put(f"/admin/users/{plain_user.id}/roles", json={"roles": []}, headers=moderator_headers)
        assert response.status_code == 403


class TestDeleteUserEndpoint:

    def test_delete_with_confirmation(
        self, client: TestClient, db_session: Session, admin_headers: dict, plain_user: User, make_member
    ):
        # Arrange
        make_member("Ulla User", "ulla@portal.test", user=plain_user)
        user_id = plain_user.id

        # Act
        response = client.request(
            "DELETE",
            f"/admin/users/{user_id}",
            json={"email_confirmation": plain_user.email},
            headers=admin_headers,
        )

        # Assert
        assert response.status_code == 200
        deleted = response.json()["deleted_user"]
        assert deleted["email"] == "user@portal.test"
        assert deleted["had_member_profile"] is True
        assert db_session.get(User, user_id) is None

    def test_wrong_confirmation(self, client: TestClient, db_session: Session, admin_headers: dict, plain_user: User):
        response = client.request(
            "DELETE",
            f"/admin/users/{plain_user.id}",
            json={"email_confirmation": "USER@portal.test"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert db_session.get(User, plain_user.id) is not None

    def test_missing_confirmation(self, client: TestClient, admin_headers: dict, plain_user: User):
        assert client.delete(f"/admin/users/{plain_user.id}", headers=admin_headers).status_code == 400

    def test_cannot_delete_self(self, client: TestClient, admin_headers: dict, admin_user: User):
        response = client.request(
            "DELETE",
            f"/admin/users/{admin_user.id}",
            json={"email_confirmation": admin_user.email},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_cannot_delete_admin(self, client: TestClient, admin_headers: dict, second_admin: User):
        response = client.request(
            "DELETE",
            f"/admin/users/{second_admin.id}",
            json={"email_confirmation": second_admin.email},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_blocked_by_authored_content(
        self, client: TestClient, admin_headers: dict, official_user: User, make_document, make_article
    ):
        make_document(official_user, "Budget Law")
        make_article(official_user, "Opinion Piece")

        response = client.request(
            "DELETE",
            f"/admin/users/{official_user.id}",
            json={"email_confirmation": official_user.email},
            headers=admin_headers,
        )

        assert response.status_code == 409
        details = response.json()["details"]
        assert details["content_summary"] == {"documents": 1, "articles": 1, "news": 0}
        assert details["content_details"]["documents"] == ["Budget Law"]

    def test_not_found(self, client: TestClient, admin_headers: dict):
        response = client.request(
            "DELETE", f"/admin/users/{uuid4()}", json={"email_confirmation": "x@y.z"}, headers=admin_headers
        )
        assert response.status_code == 404
