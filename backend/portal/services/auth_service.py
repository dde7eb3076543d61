"""
Authentication Service Module
=============================

Consolidated authentication service handling:
- Password hashing using Argon2
- JWT Access & Refresh token creation with type discrimination
- Token decoding and validation
- Token version tracking for forced logout
- Account lockout management
- Self-service registration and password change

Registration never grants roles: a new account is pending until an
administrator assigns at least one role.
"""

from datetime import datetime, timedelta, UTC
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session
from jose import jwt, JWTError, ExpiredSignatureError
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, Argon2Error, InvalidHashError

from portal.models.user import User
from portal.core.config import settings
from portal.core.exceptions import (
    TokenExpiredError,
    TokenInvalidError,
    TokenVersionMismatchError,
    AccountLockedError,
    AccountDisabledError,
    InvalidCredentialsError,
    InvalidPasswordError,
    EmailAlreadyExistsError,
)
from portal.core.logging import get_logger, security_logger

# Initialize logger
logger = get_logger(__name__)


# ==========================
# Password Hasher Configuration
# ==========================

ph = PasswordHasher(
    time_cost=3,        # Number of passes
    memory_cost=65536,  # 64 MB memory
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


# ==========================
# Token Types
# ==========================

class TokenType:
    """Token type constants for discrimination."""
    ACCESS = "access"
    REFRESH = "refresh"


# ==========================
# Auth Service Class
# ==========================

class AuthService:
    """
    Authentication service handling all auth-related operations.

    Usage:
        auth_service = AuthService(db)
        user, tokens = auth_service.authenticate_user(email, password)
    """

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Password Utilities
    # --------------------------

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash a password using Argon2id."""
        return ph.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise
        """
        try:
            ph.verify(hashed_password, plain_password)
            return True
        except VerifyMismatchError:
            return False
        except (Argon2Error, InvalidHashError) as e:
            logger.warning(
                "Password verification error",
                extra={"error": str(e)}
            )
            return False

    # --------------------------
    # Token Creation
    # --------------------------

    @staticmethod
    def _create_token(
        user_id: UUID,
        token_version: int,
        token_type: str,
        expires_delta: timedelta,
    ) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "token_version": token_version,
            "type": token_type,
            "exp": now + expires_delta,
            "iat": now,
            "iss": settings.ISSUER,
            "aud": settings.AUDIENCE,
        }
        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @classmethod
    def create_access_token(
        cls,
        user_id: UUID,
        token_version: int,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a JWT access token.

        Roles are deliberately not embedded: they are re-read from the
        database on every request.
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        return cls._create_token(user_id, token_version, TokenType.ACCESS, expires_delta)

    @classmethod
    def create_refresh_token(
        cls,
        user_id: UUID,
        token_version: int,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a JWT refresh token."""
        if expires_delta is None:
            expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        return cls._create_token(user_id, token_version, TokenType.REFRESH, expires_delta)

    # --------------------------
    # Token Decoding & Validation
    # --------------------------

    @staticmethod
    def decode_token(token: str, expected_type: Optional[str] = None) -> dict:
        """
        Decode and validate a JWT token.

        Raises:
            TokenExpiredError: If token has expired
            TokenInvalidError: If token is invalid
        """
        try:
            payload = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                issuer=settings.ISSUER,
                audience=settings.AUDIENCE,
            )
        except ExpiredSignatureError:
            raise TokenExpiredError(token_type=expected_type or "unknown")
        except JWTError as e:
            logger.warning(
                "Token decode error",
                extra={"error": str(e)}
            )
            raise TokenInvalidError(reason=str(e))

        if expected_type and payload.get("type") != expected_type:
            raise TokenInvalidError(
                reason=f"Expected {expected_type} token, got {payload.get('type')}"
            )

        return payload

    def get_tokens_for_user(self, user: User) -> dict:
        """Generate access and refresh tokens for a user."""
        return {
            "access_token": self.create_access_token(user.id, user.token_version),
            "refresh_token": self.create_refresh_token(user.id, user.token_version),
            "token_type": "bearer",
            "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        }

    def _user_from_payload(self, payload: dict) -> User:
        user_id = payload.get("sub")
        token_version = payload.get("token_version")

        if not user_id or token_version is None:
            raise TokenInvalidError(reason="Invalid token payload")

        try:
            user_uuid = UUID(user_id)
        except ValueError:
            raise TokenInvalidError(reason="Invalid user ID format")

        user = self.db.get(User, user_uuid)
        if not user:
            raise TokenInvalidError(reason="User not found")

        if user.token_version != token_version:
            raise TokenVersionMismatchError()

        if user.is_locked:
            raise AccountLockedError()

        if not user.is_active:
            raise AccountDisabledError()

        return user

    # --------------------------
    # Registration
    # --------------------------

    def register_user(self, name: str, email: str, password: str) -> User:
        """
        Create a new account with an empty role set.

        Raises:
            EmailAlreadyExistsError: If the email is taken
        """
        email = email.lower()
        if self.db.query(User).filter(User.email == email).first():
            raise EmailAlreadyExistsError()

        user = User(
            name=name,
            email=email,
            hashed_password=self.hash_password(password),
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info("User registered", extra={"user_id": str(user.id)})
        return user

    # --------------------------
    # Authentication Methods
    # --------------------------

    def authenticate_user(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[User, dict]:
        """
        Authenticate a user with email and password.

        Pending accounts (no roles) can sign in; routing then confines
        them to the approval notice.

        Raises:
            InvalidCredentialsError: If credentials are invalid
            AccountLockedError: If account is locked
            AccountDisabledError: If account is disabled
        """
        ip_address = ip_address or "unknown"
        user = self.db.query(User).filter(User.email == email.lower()).first()

        if not user:
            security_logger.log_login_failure(email=email, ip_address=ip_address, reason="user_not_found")
            raise InvalidCredentialsError()

        if user.is_locked:
            security_logger.log_login_failure(email=email, ip_address=ip_address, reason="account_locked")
            raise AccountLockedError()

        if not user.is_active:
            security_logger.log_login_failure(email=email, ip_address=ip_address, reason="account_disabled")
            raise AccountDisabledError()

        if not self.verify_password(password, user.hashed_password):
            if user.increment_failed_attempts(settings.MAX_LOGIN_ATTEMPTS):
                security_logger.log_account_locked(user_id=str(user.id), ip_address=ip_address)
            self.db.commit()

            security_logger.log_login_failure(email=email, ip_address=ip_address, reason="invalid_password")
            raise InvalidCredentialsError()

        user.failed_attempts = 0
        self.db.commit()

        tokens = self.get_tokens_for_user(user)

        security_logger.log_login_success(
            user_id=str(user.id),
            ip_address=ip_address,
            user_agent=user_agent or "unknown",
        )
        return user, tokens

    def refresh_tokens(self, refresh_token: str) -> dict:
        """
        Refresh access token using a valid refresh token.

        Raises:
            TokenInvalidError: If token is invalid
            TokenVersionMismatchError: If token version doesn't match
        """
        payload = self.decode_token(refresh_token, expected_type=TokenType.REFRESH)
        try:
            user = self._user_from_payload(payload)
        except TokenVersionMismatchError:
            security_logger.log_token_invalid(reason="token_version_mismatch", ip_address="unknown")
            raise

        security_logger.log_token_refresh(user_id=str(user.id))
        return self.get_tokens_for_user(user)

    def logout(self, user: User) -> None:
        """Logout user by invalidating all tokens."""
        user.invalidate_tokens()
        self.db.commit()
        security_logger.log_logout(user_id=str(user.id))

    def change_password(
        self,
        user: User,
        current_password: str,
        new_password: str,
    ) -> None:
        """
        Change a user's password and invalidate every issued token.

        Raises:
            InvalidPasswordError: If current_password is wrong
        """
        if not self.verify_password(current_password, user.hashed_password):
            raise InvalidPasswordError()

        user.hashed_password = self.hash_password(new_password)
        user.invalidate_tokens()
        self.db.commit()
        security_logger.log_password_changed(user_id=str(user.id))

    def validate_access_token(self, token: str) -> User:
        """
        Validate an access token and return the user.

        Raises:
            TokenInvalidError: If token is invalid
            TokenVersionMismatchError: If token version doesn't match
            AccountLockedError: If account is locked
            AccountDisabledError: If account is disabled
        """
        payload = self.decode_token(token, expected_type=TokenType.ACCESS)
        return self._user_from_payload(payload)
