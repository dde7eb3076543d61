"""
Notification Service Unit Tests
===============================

Mailjet calls are served by ``httpx.MockTransport``; nothing leaves the
process.
"""

import json

import httpx
import pytest

from portal.core.config import settings
from portal.models.role_enum import Role
from portal.services.notification_service import (
    MAX_ATTEMPTS,
    NotificationService,
    PublishedDocumentNotice,
    Recipient,
    chunked,
)


pytestmark = pytest.mark.unit


JANE = Recipient(email="jane@example.com", name="Jane")

NOTICE = PublishedDocumentNotice(
    title="Budget Law",
    slug="budget-law",
    category="LAW",
    description="Annual budget",
    author_name="Olga Official",
)


@pytest.fixture
def mail_configured(monkeypatch):
    monkeypatch.setattr(settings, "MAILJET_API_KEY", "public-key")
    monkeypatch.setattr(settings, "MAILJET_SECRET_KEY", "secret-key")


def recording_transport(requests, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json={"Messages": [{"Status": "success"}]})

    return httpx.MockTransport(handler)


class TestChunked:

    def test_batches(self):
        assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]

    def test_empty(self):
        assert list(chunked([], 10)) == []


class TestSendEmail:

    def test_skipped_without_credentials(self, monkeypatch):
        monkeypatch.setattr(settings, "MAILJET_API_KEY", "")
        requests = []
        service = NotificationService(transport=recording_transport(requests))

        assert service.send_email(JANE, "Hi", "text", "<p>html</p>") is False
        assert requests == []

    def test_mailjet_payload(self, mail_configured):
        # Arrange
        requests = []
        service = NotificationService(transport=recording_transport(requests))

        # Act
        assert service.send_email(JANE, "Hi", "text", "<p>html</p>") is True

        # Assert
        request = requests[0]
        assert str(request.url) == settings.MAILJET_API_URL
        assert request.headers["Authorization"].startswith("Basic ")
        message = json.loads(request.content)["Messages"][0]
        assert message["To"] == [{"Email": "jane@example.com", "Name": "Jane"}]
        assert message["Subject"] == "Hi"
        assert message["From"]["Email"] == settings.MAIL_FROM_EMAIL

    def test_http_error_reported_not_raised(self, mail_configured):
        requests = []
        service = NotificationService(transport=recording_transport(requests, status_code=500))

        assert service.send_email(JANE, "Hi", "text", "html") is False
        assert len(requests) == 1

    def test_timeout_retried_then_given_up(self, mail_configured):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        service = NotificationService(transport=httpx.MockTransport(handler))

        assert service.send_email(JANE, "Hi", "text", "html") is False
        assert len(attempts) == MAX_ATTEMPTS


class TestMessages:

    def test_role_assignment_lists_roles(self, mail_configured):
        requests = []
        service = NotificationService(transport=recording_transport(requests))

        service.send_role_assignment_email(JANE, [Role.OFFICIAL, Role.USER])

        text = json.loads(requests[0].content)["Messages"][0]["TextPart"]
        assert "OFFICIAL" in text and "USER" in text

    def test_role_removal_message(self, mail_configured):
        requests = []
        service = NotificationService(transport=recording_transport(requests))

        service.send_role_assignment_email(JANE, [])

        text = json.loads(requests[0].content)["Messages"][0]["TextPart"]
        assert "awaiting approval" in text

    def test_document_published_links_document(self, mail_configured):
        requests = []
        service = NotificationService(transport=recording_transport(requests))

        service.send_document_published_email(JANE, NOTICE)

        message = json.loads(requests[0].content)["Messages"][0]
        assert message["Subject"] == "New document published: Budget Law"
        assert f"{settings.PORTAL_BASE_URL}/documents/budget-law" in message["TextPart"]

    def test_html_part_escapes_user_text(self, mail_configured):
        requests = []
        service = NotificationService(transport=recording_transport(requests))
        notice = PublishedDocumentNotice(
            title="<script>alert(1)</script>",
            slug="script",
            category="LAW",
            description="Tom & Jerry",
            author_name="<b>Olga</b>",
        )

        service.send_document_published_email(Recipient(email="x@example.com", name="<i>X</i>"), notice)

        html = json.loads(requests[0].content)["Messages"][0]["HTMLPart"]
        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "Tom &amp; Jerry" in html
        assert "&lt;b&gt;Olga&lt;/b&gt;" in html
        assert "Hello &lt;i&gt;X&lt;/i&gt;" in html


class TestPublishFanOut:

    def test_batches_with_delay(self, mail_configured, monkeypatch):
        # Arrange
        monkeypatch.setattr(settings, "NOTIFICATION_BATCH_SIZE", 2)
        monkeypatch.setattr(settings, "NOTIFICATION_BATCH_DELAY_SECONDS", 0.5)
        requests, sleeps = [], []
        service = NotificationService(transport=recording_transport(requests), sleep=sleeps.append)
        recipients = [Recipient(f"r{i}@example.com", f"R{i}") for i in range(5)]

        # Act
        sent = service.notify_document_published(recipients, NOTICE)

        # Assert
        assert sent == 5
        assert len(requests) == 5
        assert sleeps == [0.5, 0.5]

    def test_no_recipients(self):
        sleeps = []
        service = NotificationService(sleep=sleeps.append)
        assert service.notify_document_published([], NOTICE) == 0
        assert sleeps == []

    def test_failures_counted_not_raised(self, mail_configured):
        service = NotificationService(transport=recording_transport([], status_code=400), sleep=lambda s: None)
        assert service.notify_document_published([JANE], NOTICE) == 0
