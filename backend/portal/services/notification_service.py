"""
Notification Service Module
===========================

Outbound email through the Mailjet v3.1 send API.

Messages:
- welcome email on registration
- role assignment email whenever an administrator changes a role set
- document published email to every approved account except the author

Sending is best-effort. Every failure is logged and reported as
``False``; nothing here raises into the request that triggered it.
When the Mailjet keys are not configured sending is skipped.
"""

import time
from html import escape
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

import httpx
from httpx import HTTPError, TimeoutException

from portal.core.config import settings
from portal.core.logging import get_logger
from portal.models.role_enum import Role

logger = get_logger(__name__)

MAX_ATTEMPTS = 2


@dataclass(frozen=True)
class Recipient:
    email: str
    name: str


@dataclass(frozen=True)
class PublishedDocumentNotice:
    """Snapshot of a published document, detached from the session."""

    title: str
    slug: str
    category: str
    description: Optional[str]
    author_name: str


ROLE_DESCRIPTIONS = {
    Role.USER: "Read published documents and browse the member directory",
    Role.EDITOR: "Edit portal content",
    Role.JOURNALIST: "Write articles and news",
    Role.OFFICIAL: "Create documents and see unpublished drafts",
    Role.MODERATOR: "Moderate member profiles and see internal documents",
    Role.ADMIN: "Manage accounts, roles and all content",
}


def chunked(items: Sequence, size: int) -> Iterable[Sequence]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class NotificationService:
    """
    Mailjet email sender.

    Usage:
        NotificationService().send_welcome_email(Recipient(user.email, user.name))

    ``transport`` and ``sleep`` exist so tests can observe requests and
    batching without network access or real delays.
    """

    def __init__(
        self,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.transport = transport
        self.sleep = sleep

    @property
    def enabled(self) -> bool:
        return settings.mail_enabled

    def _payload(self, to: Recipient, subject: str, text: str, html: str) -> dict:
        return {
            "Messages": [
                {
                    "From": {"Email": settings.MAIL_FROM_EMAIL, "Name": settings.MAIL_FROM_NAME},
                    "To": [{"Email": to.email, "Name": to.name}],
                    "Subject": subject,
                    "TextPart": text,
                    "HTMLPart": html,
                }
            ]
        }

    def send_email(self, to: Recipient, subject: str, text: str, html: str) -> bool:
        """
        Send a single email.

        Returns:
            True if Mailjet accepted the message, False otherwise
        """
        if not self.enabled:
            logger.warning(
                "Mailjet credentials not configured, email skipped",
                extra={"subject": subject}
            )
            return False

        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                with httpx.Client(
                    timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
                    auth=(settings.MAILJET_API_KEY, settings.MAILJET_SECRET_KEY),
                    transport=self.transport,
                ) as client:
                    response = client.post(
                        settings.MAILJET_API_URL,
                        json=self._payload(to, subject, text, html),
                    )
                    response.raise_for_status()

                logger.info("Email sent", extra={"subject": subject, "attempt": attempt})
                return True

            except TimeoutException:
                logger.warning("Mailjet timeout", extra={"attempt": attempt, "subject": subject})

            except HTTPError as e:
                logger.error(
                    "Mailjet HTTP error",
                    extra={"attempt": attempt, "subject": subject, "error": str(e)}
                )
                return False

        logger.error("Email not sent after retries", extra={"subject": subject, "attempts": MAX_ATTEMPTS})
        return False

    # --------------------------
    # Messages
    # --------------------------

    def send_welcome_email(self, to: Recipient) -> bool:
        subject = f"Welcome to {settings.MAIL_FROM_NAME}"
        text = (
            f"Hello {to.name},\n\n"
            "Thank you for registering. Your account is awaiting approval by an "
            "administrator. You will receive another email once roles have been "
            "assigned to your account.\n"
        )
        html = (
            f"<p>Hello {escape(to.name)},</p>"
            "<p>Thank you for registering. Your account is awaiting approval by an "
            "administrator.</p>"
        )
        return self.send_email(to, subject, text, html)

    def send_role_assignment_email(self, to: Recipient, roles: Iterable[Role]) -> bool:
        role_list = sorted(Role(r) for r in roles)
        if role_list:
            lines = [f"- {r.value}: {ROLE_DESCRIPTIONS[r]}" for r in role_list]
            body = "Your account has been approved with the following roles:\n" + "\n".join(lines)
            items = "".join(f"<li><strong>{r.value}</strong>: {ROLE_DESCRIPTIONS[r]}</li>" for r in role_list)
            html_body = f"<p>Your account has been approved with the following roles:</p><ul>{items}</ul>"
        else:
            body = "All roles have been removed from your account. It is now awaiting approval."
            html_body = f"<p>{body}</p>"

        text = f"Hello {to.name},\n\n{body}\n\nSign in: {settings.PORTAL_BASE_URL}/login\n"
        html = f"<p>Hello {escape(to.name)},</p>{html_body}<p><a href=\"{settings.PORTAL_BASE_URL}/login\">Sign in</a></p>"
        return self.send_email(to, "Your account roles have been updated", text, html)

    def send_document_published_email(self, to: Recipient, notice: PublishedDocumentNotice) -> bool:
        url = f"{settings.PORTAL_BASE_URL}/documents/{notice.slug}"
        subject = f"New document published: {notice.title}"
        text = (
            f"Hello {to.name},\n\n"
            f"{notice.author_name} published \"{notice.title}\" ({notice.category}).\n"
            f"{notice.description or ''}\n\n"
            f"Read it: {url}\n"
        )
        html = (
            f"<p>Hello {escape(to.name)},</p>"
            f"<p>{escape(notice.author_name)} published <strong>{escape(notice.title)}</strong> ({notice.category}).</p>"
            f"<p>{escape(notice.description or '')}</p>"
            f"<p><a href=\"{url}\">Read the document</a></p>"
        )
        return self.send_email(to, subject, text, html)

    def notify_document_published(
        self,
        recipients: List[Recipient],
        notice: PublishedDocumentNotice,
    ) -> int:
        """
        Fan out the publish email in batches with a pause between batches.

        Returns:
            Number of messages accepted
        """
        if not recipients:
            return 0

        sent = 0
        batches = list(chunked(recipients, max(settings.NOTIFICATION_BATCH_SIZE, 1)))
        for index, batch in enumerate(batches):
            for recipient in batch:
                if self.send_document_published_email(recipient, notice):
                    sent += 1
            if index < len(batches) - 1:
                self.sleep(settings.NOTIFICATION_BATCH_DELAY_SECONDS)

        logger.info(
            "Publish notifications dispatched",
            extra={"slug": notice.slug, "recipients": len(recipients), "sent": sent}
        )
        return sent


def get_notification_service() -> NotificationService:
    """FastAPI dependency; overridden in tests."""
    return NotificationService()
