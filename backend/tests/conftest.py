"""
Test Configuration and Fixtures
================================

Central configuration for pytest with all shared fixtures.

Features:
- SQLite in-memory database for testing
- TestClient setup
- Account fixtures for every lifecycle state and role of interest
- Dependency overrides for the database session and email sending
"""

import os
import uuid
from typing import Callable, Generator, Iterable, List, Optional

import email_validator
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Set testing environment before importing portal modules
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-min-32-chars"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"  # Disable rate limiting in tests
os.environ["MAILJET_API_KEY"] = ""
os.environ["MAILJET_SECRET_KEY"] = ""

# Fixture accounts use the reserved ".test" TLD; let email-validator accept it
email_validator.TEST_ENVIRONMENT = True

from portal.db.base import Base
from portal.db.session import get_db
from portal.models.content import Article
from portal.models.document import Document
from portal.models.member import Member
from portal.models.role_enum import Role
from portal.models.user import User
from portal.core.enums import ContentStatus, DocumentClassification
from portal.services.auth_service import AuthService
from portal.services.notification_service import NotificationService, get_notification_service
from portal.main import app as main_app


TEST_PASSWORD = "TestPassword123!"


# =====================================
# Database Configuration
# =====================================

# StaticPool is used to maintain the same connection across tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


# =====================================
# Notification Double
# =====================================

class RecordingNotificationService(NotificationService):
    """Records every message instead of calling Mailjet."""

    def __init__(self):
        super().__init__()
        self.sent: List[dict] = []

    def send_email(self, to, subject, text, html) -> bool:
        self.sent.append({"to": to.email, "subject": subject, "text": text})
        return True

    def subjects_for(self, email: str) -> List[str]:
        return [m["subject"] for m in self.sent if m["to"] == email]


# =====================================
# Database Fixtures
# =====================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    Creates all tables before each test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifications() -> RecordingNotificationService:
    return RecordingNotificationService()


@pytest.fixture(scope="function")
def client(db_session: Session, notifications: RecordingNotificationService) -> Generator[TestClient, None, None]:
    """TestClient bound to the test session and the recording notifier."""
    def override_get_db():
        yield db_session

    main_app.dependency_overrides[get_db] = override_get_db
    main_app.dependency_overrides[get_notification_service] = lambda: notifications

    with TestClient(main_app) as test_client:
        yield test_client

    main_app.dependency_overrides.clear()


# =====================================
# Account Fixtures
# =====================================

@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """
    Factory for accounts.

    Usage:
        user = make_user("someone@example.com", [Role.USER])
    """
    hashed_password = AuthService.hash_password(TEST_PASSWORD)

    def _make_user(
        email: str,
        roles: Iterable[Role] = (),
        name: Optional[str] = None,
        **fields,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            email=email,
            name=name or email.split("@")[0].title(),
            hashed_password=hashed_password,
            roles=list(roles),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user("admin@portal.test", [Role.ADMIN], name="Ada Admin")


@pytest.fixture
def second_admin(make_user) -> User:
    return make_user("admin2@portal.test", [Role.ADMIN], name="Second Admin")


@pytest.fixture
def official_user(make_user) -> User:
    return make_user("official@portal.test", [Role.OFFICIAL], name="Olga Official")


@pytest.fixture
def second_official(make_user) -> User:
    return make_user("official2@portal.test", [Role.OFFICIAL], name="Oscar Official")


@pytest.fixture
def moderator_user(make_user) -> User:
    return make_user("moderator@portal.test", [Role.MODERATOR], name="Mona Moderator")


@pytest.fixture
def plain_user(make_user) -> User:
    return make_user("user@portal.test", [Role.USER], name="Ulla User")


@pytest.fixture
def pending_user(make_user) -> User:
    return make_user("pending@portal.test", [], name="Pat Pending")


# =====================================
# Content Fixtures
# =====================================

@pytest.fixture
def make_document(db_session: Session) -> Callable[..., Document]:
    def _make_document(
        author: User,
        title: str,
        status: ContentStatus = ContentStatus.PUBLISHED,
        classification: DocumentClassification = DocumentClassification.PUBLIC,
        **fields,
    ) -> Document:
        document = Document(
            slug=title.lower().replace(" ", "-"),
            title=title,
            content=fields.pop("content", f"# {title}\n\nBody of {title}."),
            status=status,
            classification=classification,
            author_id=author.id,
            **fields,
        )
        db_session.add(document)
        db_session.commit()
        db_session.refresh(document)
        return document

    return _make_document


@pytest.fixture
def make_member(db_session: Session) -> Callable[..., Member]:
    def _make_member(name: str, email: str, user: Optional[User] = None, **fields) -> Member:
        member = Member(name=name, email=email, **fields)
        member.user = user
        db_session.add(member)
        db_session.commit()
        db_session.refresh(member)
        return member

    return _make_member


@pytest.fixture
def make_article(db_session: Session) -> Callable[..., Article]:
    def _make_article(author: User, title: str) -> Article:
        article = Article(
            title=title,
            slug=title.lower().replace(" ", "-"),
            content="",
            status=ContentStatus.PUBLISHED,
            author_id=author.id,
        )
        db_session.add(article)
        db_session.commit()
        return article

    return _make_article


# =====================================
# Auth Header Fixtures
# =====================================

def bearer_for(user: User) -> dict:
    """Authorization header carrying a fresh access token for ``user``."""
    token = AuthService.create_access_token(user_id=user.id, token_version=user.token_version)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return bearer_for(admin_user)


@pytest.fixture
def official_headers(official_user: User) -> dict:
    return bearer_for(official_user)


@pytest.fixture
def moderator_headers(moderator_user: User) -> dict:
    return bearer_for(moderator_user)


@pytest.fixture
def user_headers(plain_user: User) -> dict:
    return bearer_for(plain_user)


@pytest.fixture
def pending_headers(pending_user: User) -> dict:
    return bearer_for(pending_user)


# =====================================
# Utility Fixtures
# =====================================

@pytest.fixture
def test_password() -> str:
    """Return the password every fixture account is created with."""
    return TEST_PASSWORD


@pytest.fixture
def headers_for() -> Callable[[User], dict]:
    return bearer_for
