"""
Authentication Service Unit Tests
==================================

Tests for the AuthService class covering:
- Password hashing and verification
- Access and refresh token creation and validation
- Registration into the pending state
- User authentication flow and account lockout
- Token version invalidation on logout and password change
"""

import pytest
from datetime import timedelta
from uuid import uuid4

from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.core.exceptions import (
    AccountDisabledError,
    AccountLockedError,
    EmailAlreadyExistsError,
    InvalidCredentialsError,
    InvalidPasswordError,
    TokenExpiredError,
    TokenInvalidError,
    TokenVersionMismatchError,
)
from portal.models.role_enum import Role
from portal.models.user import User
from portal.services.auth_service import AuthService, TokenType


pytestmark = pytest.mark.unit


class TestPasswordHashing:
    """Tests for password hashing functionality."""

    def test_hash_password_creates_different_hashes(self):
        """Same password creates different hashes (salt)."""
        # Act
        hash1 = AuthService.hash_password("TestPassword123!")
        hash2 = AuthService.hash_password("TestPassword123!")

        # Assert
        assert hash1 != hash2
        assert hash1.startswith("$argon2")

    def test_verify_password(self):
        # Arrange
        hashed = AuthService.hash_password("TestPassword123!")

        # Assert
        assert AuthService.verify_password("TestPassword123!", hashed) is True
        assert AuthService.verify_password("WrongPassword123!", hashed) is False
        assert AuthService.verify_password("", hashed) is False

    def test_verify_password_malformed_hash(self):
        assert AuthService.verify_password("anything", "not-a-hash") is False


class TestTokens:
    """Tests for token creation and decoding."""

    def test_access_token_payload(self):
        # Arrange
        user_id = uuid4()

        # Act
        token = AuthService.create_access_token(user_id=user_id, token_version=3)
        payload = AuthService.decode_token(token, expected_type=TokenType.ACCESS)

        # Assert
        assert payload["sub"] == str(user_id)
        assert payload["token_version"] == 3
        assert payload["type"] == TokenType.ACCESS
        assert "roles" not in payload

    def test_refresh_token_rejected_as_access(self):
        token = AuthService.create_refresh_token(user_id=uuid4(), token_version=1)
        with pytest.raises(TokenInvalidError):
            AuthService.decode_token(token, expected_type=TokenType.ACCESS)

    def test_expired_token(self):
        token = AuthService.create_access_token(
            user_id=uuid4(), token_version=1, expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(TokenExpiredError):
            AuthService.decode_token(token)

    def test_garbage_token(self):
        with pytest.raises(TokenInvalidError):
            AuthService.decode_token("not.a.token")


class TestRegistration:

    def test_register_creates_pending_account(self, db_session: Session):
        # Act
        user = AuthService(db_session).register_user("Jane", "Jane@Example.com", "long-enough")

        # Assert
        assert user.email == "jane@example.com"
        assert user.roles == frozenset()
        assert user.hashed_password != "long-enough"

    def test_register_duplicate_email(self, db_session: Session, plain_user: User):
        with pytest.raises(EmailAlreadyExistsError):
            AuthService(db_session).register_user("Other", plain_user.email.upper(), "long-enough")


class TestAuthenticate:

    def test_success_resets_failed_attempts(self, db_session: Session, plain_user: User, test_password: str):
        # Arrange
        plain_user.failed_attempts = 2
        db_session.commit()

        # Act
        user, tokens = AuthService(db_session).authenticate_user(plain_user.email, test_password)

        # Assert
        assert user.id == plain_user.id
        assert user.failed_attempts == 0
        assert tokens["token_type"] == "bearer"

    def test_pending_account_can_sign_in(self, db_session: Session, pending_user: User, test_password: str):
        user, _ = AuthService(db_session).authenticate_user(pending_user.email, test_password)
        assert user.roles == frozenset()

    def test_unknown_email(self, db_session: Session):
        with pytest.raises(InvalidCredentialsError):
            AuthService(db_session).authenticate_user("nobody@portal.test", "whatever")

    def test_lockout_after_max_attempts(self, db_session: Session, plain_user: User, test_password: str):
        # Arrange
        service = AuthService(db_session)

        # Act
        for _ in range(settings.MAX_LOGIN_ATTEMPTS):
            with pytest.raises(InvalidCredentialsError):
                service.authenticate_user(plain_user.email, "WrongPassword!")

        # Assert
        assert plain_user.is_locked is True
        with pytest.raises(AccountLockedError):
            service.authenticate_user(plain_user.email, test_password)

    def test_disabled_account(self, db_session: Session, make_user, test_password: str):
        user = make_user("disabled@portal.test", [Role.USER], is_active=False)
        with pytest.raises(AccountDisabledError):
            AuthService(db_session).authenticate_user(user.email, test_password)


class TestTokenLifecycle:

    def test_validate_access_token(self, db_session: Session, official_user: User):
        token = AuthService.create_access_token(official_user.id, official_user.token_version)
        assert AuthService(db_session).validate_access_token(token).id == official_user.id

    def test_logout_invalidates_tokens(self, db_session: Session, official_user: User):
        # Arrange
        service = AuthService(db_session)
        token = AuthService.create_access_token(official_user.id, official_user.token_version)

        # Act
        service.logout(official_user)

        # Assert
        with pytest.raises(TokenVersionMismatchError):
            service.validate_access_token(token)

    def test_refresh_issues_new_pair(self, db_session: Session, official_user: User):
        refresh = AuthService.create_refresh_token(official_user.id, official_user.token_version)
        tokens = AuthService(db_session).refresh_tokens(refresh)
        assert set(tokens) == {"access_token", "refresh_token", "token_type", "expires_in"}

    def test_change_password(self, db_session: Session, plain_user: User, test_password: str):
        # Arrange
        service = AuthService(db_session)
        old_version = plain_user.token_version

        # Act
        service.change_password(plain_user, test_password, "BrandNewPassword!")

        # Assert
        assert plain_user.token_version == old_version + 1
        assert AuthService.verify_password("BrandNewPassword!", plain_user.hashed_password)

    def test_change_password_wrong_current(self, db_session: Session, plain_user: User):
        with pytest.raises(InvalidPasswordError):
            AuthService(db_session).change_password(plain_user, "WrongPassword!", "BrandNewPassword!")
